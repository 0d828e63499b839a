import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Klaxon"
    debug: bool = False
    log_level: str = "INFO"

    # Shared secret configured on the GitHub webhook. Left unset, every request is refused.
    github_verification_token: Optional[str] = None

    # Slack incoming webhook
    slack_webhook_url: Optional[str] = None
    slack_channel_id: Optional[str] = None
    slack_timeout: float = 10

    # Comma-separated HMAC algorithms accepted in X-Hub-Signature
    signature_algorithms: str = "sha1,sha256"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def allowed_algorithms(self) -> tuple[str, ...]:
        return tuple(
            a.strip().lower() for a in self.signature_algorithms.split(",") if a.strip()
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
