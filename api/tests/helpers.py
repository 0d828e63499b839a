"""Shared builders for webhook deliveries."""

import json
from typing import Optional

from klaxon.config import Settings
from klaxon.dispatcher import InboundRequest
from klaxon.security import sign_string

TOKEN = "test-verification-token"
SLACK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"
DELIVERY_ID = "72d3162e-cc78-11e3-81ab-4c9367dc0958"

ALERT_PAYLOAD = {
    "action": "create",
    "alert": {
        "id": 123456789,
        "affected_package_name": "foobar",
        "external_reference": "https://example.com/foobar",
        "external_identifier": "CVE-2019-10744",
    },
    "repository": {
        "full_name": "test/TestProject",
        "html_url": "https://example.com/test/TestProject",
    },
}


def make_settings(**overrides) -> Settings:
    values = {
        "github_verification_token": TOKEN,
        "slack_webhook_url": SLACK_URL,
        "slack_channel_id": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def signed_headers(
    body: str,
    event: Optional[str] = "repository_vulnerability_alert",
    delivery: Optional[str] = DELIVERY_ID,
    algorithm: str = "sha1",
) -> dict[str, str]:
    headers = {"X-Hub-Signature": sign_string(TOKEN, body, algorithm)}
    if event is not None:
        headers["X-GitHub-Event"] = event
    if delivery is not None:
        headers["X-GitHub-Delivery"] = delivery
    return headers


def alert_body(action: str = "create") -> str:
    return json.dumps({**ALERT_PAYLOAD, "action": action})


def signed_request(body: str, **kwargs) -> InboundRequest:
    return InboundRequest(headers=signed_headers(body, **kwargs), body=body)
