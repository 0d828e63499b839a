"""Slack channel adapter."""

import json
from typing import Optional

from klaxon.channels import ChannelPayload
from klaxon.schemas.alert import AlertAction, AlertEvent, SlackAttachment, SlackMessage

ALERT_TITLE = "GitHub Vulnerability Alert"
SENDER_NAME = "GitHub"
SENDER_ICON_URL = "https://ca.slack-edge.com/T35D8CZQR-UA6QSB1JB-946b161caa44-72"


def format_vulnerability_alert(
    event: AlertEvent,
    action: AlertAction,
    channel: Optional[str] = None,
) -> SlackMessage:
    """
    Build the Slack attachment message for a vulnerability alert.

    The caller resolves *action* from ``event.action`` so that unknown
    actions never reach the formatter.
    """
    package = event.alert.affected_package_name
    repo = event.repository

    attachment = SlackAttachment(
        fallback=f"A vulnerability in {package} has been {action.verb} in {repo.full_name}.",
        color=action.color,
        title=ALERT_TITLE,
        title_link=f"{repo.html_url}/network/alerts",
        text=(
            f"A <{event.alert.external_reference}|vulnerability> with {package} "
            f"has been {action.verb} in <{repo.html_url}|{repo.full_name}>."
        ),
    )

    return SlackMessage(
        attachments=[attachment],
        username=SENDER_NAME,
        icon_url=SENDER_ICON_URL,
        channel=channel or None,
    )


def format_slack(webhook_url: str, message: SlackMessage) -> ChannelPayload:
    """Wrap a Slack message in the HTTP request for an incoming webhook."""
    return ChannelPayload(
        method="POST",
        url=webhook_url,
        headers={"Content-Type": "application/json"},
        body=json.dumps(message.to_payload()),
    )
