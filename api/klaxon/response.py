"""Response envelope returned by the dispatcher for every request."""

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class HandlerResponse:
    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }


def text_response(status_code: int, message: str) -> HandlerResponse:
    return HandlerResponse(
        status_code=status_code,
        body=message,
        headers={"Content-Type": "text/plain"},
    )


def json_response(status_code: int, content: Any) -> HandlerResponse:
    return HandlerResponse(
        status_code=status_code,
        body=json.dumps(content),
        headers={"Content-Type": "application/json"},
    )
