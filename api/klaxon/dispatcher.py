"""
Authentication and routing chain for inbound GitHub webhook deliveries.

Each step either returns ``None`` to let the next step run or a
``HandlerResponse`` that ends the chain. Steps always run in the order
listed in ``Dispatcher.steps``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional

import httpx
from pydantic import ValidationError

from klaxon.channels.slack import format_slack, format_vulnerability_alert
from klaxon.config import Settings
from klaxon.errors import ConfigurationError
from klaxon.response import HandlerResponse, json_response, text_response
from klaxon.schemas.alert import AlertAction, AlertEvent, SlackMessage
from klaxon.security import verify_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature"
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"

PING_EVENT = "ping"
ALERT_EVENT = "repository_vulnerability_alert"


@dataclass(frozen=True)
class InboundRequest:
    headers: Mapping[str, str]
    body: str  # raw, exactly as received

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def to_dict(self) -> dict:
        return {"headers": dict(self.headers), "body": self.body}


@dataclass
class _Delivery:
    """Per-request state threaded through the chain."""
    request: InboundRequest
    event: Optional[AlertEvent] = None
    message: Optional[SlackMessage] = None


Step = Callable[[_Delivery], Awaitable[Optional[HandlerResponse]]]


class Dispatcher:
    """Run one webhook delivery through the validation chain."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    @property
    def steps(self) -> tuple[Step, ...]:
        return (
            self.check_config,
            self.check_signature_header,
            self.check_event_header,
            self.check_signature,
            self.route_event,
            self.check_delivery_header,
            self.build_notification,
            self.deliver,
        )

    async def dispatch(self, request: InboundRequest) -> HandlerResponse:
        delivery = _Delivery(request=request)
        for step in self.steps:
            response = await step(delivery)
            if response is not None:
                return response
        # deliver() always terminates
        raise RuntimeError("validation chain ended without a response")

    # --- Steps ---

    async def check_config(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        if not isinstance(self.settings.github_verification_token, str):
            logger.error("GITHUB_VERIFICATION_TOKEN is not configured")
            return text_response(
                401, "GITHUB_VERIFICATION_TOKEN is a required environment variable"
            )
        return None

    async def check_signature_header(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        if not delivery.request.header(SIGNATURE_HEADER):
            logger.warning("Rejected delivery without %s", SIGNATURE_HEADER)
            return text_response(422, f"{SIGNATURE_HEADER} header not found")
        return None

    async def check_event_header(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        if not delivery.request.header(EVENT_HEADER):
            logger.warning("Rejected delivery without %s", EVENT_HEADER)
            return text_response(422, f"{EVENT_HEADER} header not found")
        return None

    async def check_signature(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        request = delivery.request
        valid = verify_signature(
            self.settings.github_verification_token,
            request.body,
            request.header(SIGNATURE_HEADER),
            self.settings.allowed_algorithms,
        )
        if not valid:
            logger.warning("%s failed verification", SIGNATURE_HEADER)
            return text_response(401, f"{SIGNATURE_HEADER} header failed verification")
        return None

    async def route_event(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        event_type = delivery.request.header(EVENT_HEADER)
        if event_type == PING_EVENT:
            logger.info("Answered ping")
            return text_response(200, "pong")
        if event_type != ALERT_EVENT:
            logger.info("Ignored unsupported event %s", event_type)
            return text_response(418, f"{EVENT_HEADER} {event_type} not supported")
        return None

    async def check_delivery_header(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        if not delivery.request.header(DELIVERY_HEADER):
            logger.warning("Rejected delivery without %s", DELIVERY_HEADER)
            return text_response(422, f"{DELIVERY_HEADER} header not found")
        return None

    async def build_notification(self, delivery: _Delivery) -> Optional[HandlerResponse]:
        try:
            payload = json.loads(delivery.request.body)
        except ValueError:
            return text_response(400, "request body is not valid JSON")

        try:
            event = AlertEvent.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Malformed %s payload: %s", ALERT_EVENT, exc.errors())
            return text_response(422, f"{ALERT_EVENT} payload is malformed")

        try:
            action = AlertAction(event.action)
        except ValueError:
            logger.warning("Unsupported alert action %r", event.action)
            return text_response(422, f"action {event.action} not supported")

        delivery.event = event
        delivery.message = format_vulnerability_alert(
            event, action, channel=self.settings.slack_channel_id
        )
        logger.info(
            "Vulnerability in %s %s in %s",
            event.alert.affected_package_name,
            action.verb,
            event.repository.full_name,
        )
        return None

    async def deliver(self, delivery: _Delivery) -> HandlerResponse:
        if not self.settings.slack_webhook_url:
            raise ConfigurationError("SLACK_WEBHOOK_URL is a required environment variable")

        payload = format_slack(self.settings.slack_webhook_url, delivery.message)
        if self.http_client is not None:
            slack_response = await self._send(self.http_client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.settings.slack_timeout) as client:
                slack_response = await self._send(client, payload)

        logger.info(
            "Slack responded %s %s", slack_response.status_code, slack_response.reason_phrase
        )
        return json_response(
            200,
            {
                "input": delivery.request.to_dict(),
                "slackMessage": delivery.message.to_payload(),
                "slackResponse": {
                    "status": slack_response.status_code,
                    "statusText": slack_response.reason_phrase,
                },
            },
        )

    @staticmethod
    async def _send(client: httpx.AsyncClient, payload) -> httpx.Response:
        response = await client.request(
            method=payload.method,
            url=payload.url,
            headers=payload.headers,
            content=payload.body,
        )
        # Non-2xx from Slack is a failed delivery; it propagates to the caller.
        response.raise_for_status()
        return response
