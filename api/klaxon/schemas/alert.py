"""Pydantic models for repository_vulnerability_alert payloads and Slack messages."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class AlertAction(str, Enum):
    CREATE = "create"
    DISMISS = "dismiss"
    RESOLVE = "resolve"

    @property
    def color(self) -> str:
        return _ACTION_STYLE[self][0]

    @property
    def verb(self) -> str:
        return _ACTION_STYLE[self][1]


_ACTION_STYLE: dict[AlertAction, tuple[str, str]] = {
    AlertAction.CREATE: ("danger", "found"),
    AlertAction.DISMISS: ("warning", "dismissed"),
    AlertAction.RESOLVE: ("good", "fixed"),
}


class Alert(BaseModel):
    id: Union[int, str]
    affected_package_name: str
    external_reference: str
    external_identifier: Optional[str] = None


class Repository(BaseModel):
    full_name: str
    html_url: str


class AlertEvent(BaseModel):
    # Validated against AlertAction separately so unknown actions get their own response.
    action: str
    alert: Alert
    repository: Repository

    model_config = {"extra": "ignore"}


class SlackAttachment(BaseModel):
    fallback: str
    color: str
    title: str
    title_link: str
    text: str


class SlackMessage(BaseModel):
    attachments: list[SlackAttachment]
    username: str
    icon_url: str
    channel: Optional[str] = Field(None, description="Overrides the webhook's default channel")

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)
