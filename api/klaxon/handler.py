"""
Function-as-a-service entry point.

The runtime hands over an API Gateway style event (``headers`` and raw
``body``) and expects ``{"statusCode", "headers", "body"}`` back. Header
names are looked up exactly as the runtime delivers them.
"""

import asyncio
import logging
from typing import Any

from klaxon.config import configure_logging, get_settings
from klaxon.dispatcher import Dispatcher, InboundRequest

logger = logging.getLogger(__name__)


def klaxon(event: dict[str, Any], context: Any) -> dict[str, Any]:
    settings = get_settings()
    configure_logging(settings)

    event = event or {}
    request = InboundRequest(
        headers=event.get("headers") or {},
        body=event.get("body") or "",
    )

    try:
        response = asyncio.run(Dispatcher(settings).dispatch(request))
    except Exception:
        # Retries belong to the runtime
        logger.exception("Webhook delivery failed")
        raise

    return response.to_dict()
