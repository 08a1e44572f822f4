"""POST /webhook/{source} endpoint implementation."""

import structlog
from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from donation_webhooks.config import settings
from donation_webhooks.dispatcher import WebhookDispatcher
from donation_webhooks.logging_config import bind_webhook_context, clear_webhook_context
from donation_webhooks.receivers.base import WebhookRequest

logger = structlog.get_logger()

router = APIRouter()

DELIVERY_ID_HEADER = "X-Request-ID"


@router.post("/webhook/{source}")
async def receive_webhook(source: str, request: Request) -> PlainTextResponse:
    """Receive a payment gateway webhook.

    The raw body is handed to the source's receiver untouched so that
    signature verification sees exactly what the gateway signed.

    Returns:
        The processor's status and message, the receiver's invalid
        response, or 404 when no receiver is registered for the source
    """
    body = await request.body()
    webhook_request = WebhookRequest(source=source, body=body, headers=dict(request.headers))
    dispatcher: WebhookDispatcher = request.app.state.dispatcher

    bind_webhook_context(source, request.headers.get(DELIVERY_ID_HEADER))
    logger.info("webhook_received", content_length=len(body))

    try:
        # Entity updates are synchronous; keep them off the event loop
        result = await run_in_threadpool(dispatcher.handle, source, webhook_request)
    except Exception:
        logger.exception("webhook_processing_failed")
        return PlainTextResponse("Webhook processing failed.", status_code=500)
    finally:
        clear_webhook_context()

    if result.response is None:
        return PlainTextResponse(
            settings.unknown_source_message,
            status_code=settings.unknown_source_status,
        )

    return PlainTextResponse(result.response.message, status_code=result.response.status)
