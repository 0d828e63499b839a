import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from klaxon.config import Settings, configure_logging, get_settings
from klaxon.errors import ConfigurationError, UnsupportedAlgorithm
from klaxon.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from klaxon.routers import webhooks

API_VERSION = "0.1.0"

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = httpx.AsyncClient(timeout=settings.slack_timeout)
    yield
    await app.state.http_client.aclose()


app = FastAPI(
    title=settings.app_name,
    description="Verify GitHub vulnerability alert webhooks and relay them to Slack.",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# --- Exception Handlers ---


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": status_code, "message": message}},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(exc.status_code, exc.detail)


@app.exception_handler(UnsupportedAlgorithm)
async def unsupported_algorithm_handler(request: Request, exc: UnsupportedAlgorithm):
    logger.warning("Rejected signature using %r", exc.algorithm)
    return _error(400, str(exc))


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return _error(500, str(exc))


@app.exception_handler(httpx.HTTPError)
async def delivery_error_handler(request: Request, exc: httpx.HTTPError):
    logger.error("Slack delivery failed: %s", exc, exc_info=exc)
    return _error(502, "Notification delivery failed")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return _error(500, "Internal server error")


# --- Routes ---

app.include_router(webhooks.public_router)


@app.get("/health", summary="Health check")
async def health_ping(config: Settings = Depends(get_settings)):
    checks = {
        "verification_token": "ok" if config.github_verification_token is not None else "missing",
        "slack_webhook_url": "ok" if config.slack_webhook_url else "missing",
    }
    status = "healthy" if all(v == "ok" for v in checks.values()) else "degraded"
    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "checks": checks,
    }
