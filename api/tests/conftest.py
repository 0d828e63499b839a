import httpx
import pytest

from klaxon.config import Settings
from tests.helpers import make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def slack_calls() -> list[httpx.Request]:
    return []


@pytest.fixture
def slack_client(slack_calls):
    """AsyncClient whose transport records requests instead of calling Slack."""

    def _handler(request: httpx.Request) -> httpx.Response:
        slack_calls.append(request)
        return httpx.Response(status_code=200, text="ok")

    return httpx.AsyncClient(transport=httpx.MockTransport(_handler))
