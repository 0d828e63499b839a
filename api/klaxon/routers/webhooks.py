import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request, Response

from klaxon.config import Settings, get_settings
from klaxon.dispatcher import Dispatcher, InboundRequest

wh_logger = logging.getLogger("webhooks")

public_router = APIRouter(tags=["webhooks-public"])


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    return getattr(request.app.state, "http_client", None)


def get_dispatcher(
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
) -> Dispatcher:
    return Dispatcher(settings, http_client=http_client)


# ---------------------------------------------------------------------------
# Public: receive GitHub webhooks
# ---------------------------------------------------------------------------


@public_router.post("/", include_in_schema=False)
@public_router.post("/webhook", summary="Receive a GitHub webhook")
async def receive_webhook(request: Request, dispatcher: Dispatcher = Depends(get_dispatcher)):
    # The signature covers the raw bytes, so the body is never parsed here.
    raw = await request.body()
    try:
        body = raw.decode("utf-8")
    except UnicodeDecodeError:
        wh_logger.warning("Rejected delivery with a body that is not UTF-8")
        return Response(
            content="request body is not valid UTF-8",
            status_code=400,
            headers={"Content-Type": "text/plain"},
        )

    inbound = InboundRequest(headers=request.headers, body=body)
    wh_logger.debug(
        "Received %s delivery %s",
        request.headers.get("X-GitHub-Event"),
        request.headers.get("X-GitHub-Delivery"),
    )

    result = await dispatcher.dispatch(inbound)
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )
