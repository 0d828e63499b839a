"""Tests for the HTTP surface."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from klaxon.config import get_settings
from klaxon.main import app
from klaxon.routers.webhooks import get_http_client
from tests.helpers import alert_body, make_settings, signed_headers


@pytest.fixture
def client(slack_client):
    app.dependency_overrides[get_settings] = lambda: make_settings()
    app.dependency_overrides[get_http_client] = lambda: slack_client
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReceiveWebhook:
    """POST /webhook returns the dispatcher's response verbatim."""

    def test_missing_signature(self, client):
        resp = client.post("/webhook", content="{}")
        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == "X-Hub-Signature header not found"

    def test_ping(self, client):
        resp = client.post("/webhook", content="{}", headers=signed_headers("{}", event="ping"))
        assert resp.status_code == 200
        assert resp.text == "pong"

    def test_root_path_is_an_alias(self, client):
        resp = client.post("/", content="{}", headers=signed_headers("{}", event="ping"))
        assert resp.text == "pong"

    def test_lowercase_headers_are_accepted(self, client):
        headers = {k.lower(): v for k, v in signed_headers("{}", event="ping").items()}
        resp = client.post("/webhook", content="{}", headers=headers)
        assert resp.text == "pong"

    def test_unsupported_event(self, client):
        resp = client.post("/webhook", content="{}", headers=signed_headers("{}", event="push"))
        assert resp.status_code == 418
        assert resp.text == "X-GitHub-Event push not supported"

    def test_alert_delivered(self, client, slack_calls):
        body = alert_body("resolve")
        resp = client.post("/webhook", content=body, headers=signed_headers(body))

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        result = resp.json()
        assert result["input"]["body"] == body
        assert result["slackMessage"]["attachments"][0]["color"] == "good"
        assert result["slackResponse"] == {"status": 200, "statusText": "OK"}
        assert len(slack_calls) == 1

    def test_raw_body_is_verified_byte_for_byte(self, client):
        body = '{"action":   "create"}'
        headers = signed_headers(json.dumps(json.loads(body)), event="ping")
        resp = client.post("/webhook", content=body, headers=headers)
        assert resp.status_code == 401

    def test_unsupported_algorithm(self, client):
        resp = client.post(
            "/webhook",
            content="{}",
            headers={"X-Hub-Signature": "md5=abc", "X-GitHub-Event": "ping"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Unsupported signing hash: md5"

    def test_delivery_failure(self, client):
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        failing = httpx.AsyncClient(transport=httpx.MockTransport(_fail))
        app.dependency_overrides[get_http_client] = lambda: failing

        body = alert_body()
        resp = client.post("/webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 502
        assert resp.json() == {"error": {"code": 502, "message": "Notification delivery failed"}}

    def test_oversized_body(self, client):
        resp = client.post("/webhook", content="x" * (2 * 1024 * 1024 + 1))
        assert resp.status_code == 413

    def test_malformed_content_length(self, client):
        resp = client.post("/webhook", content="{}", headers={"Content-Length": "abc"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid Content-Length header."

    def test_body_that_is_not_utf8(self, client, slack_calls):
        resp = client.post(
            "/webhook",
            content=b"\xff\xfe{}",
            headers={"X-Hub-Signature": "sha1=abc", "X-GitHub-Event": "ping"},
        )
        assert resp.status_code == 400
        assert resp.text == "request body is not valid UTF-8"
        assert slack_calls == []

    def test_slack_error_status(self, client):
        failing = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
        )
        app.dependency_overrides[get_http_client] = lambda: failing

        body = alert_body()
        resp = client.post("/webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 502
        assert resp.json() == {"error": {"code": 502, "message": "Notification delivery failed"}}

    def test_security_headers(self, client):
        resp = client.post("/webhook", content="{}")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestHealth:
    def test_healthy(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_degraded_without_token(self, client):
        app.dependency_overrides[get_settings] = lambda: make_settings(github_verification_token=None)
        data = client.get("/health").json()
        assert data["status"] == "degraded"
        assert data["checks"]["verification_token"] == "missing"
