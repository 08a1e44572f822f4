"""
Webhook dispatch entrypoint.

Drives one webhook request through the pipeline:
1. Run pre-dispatch hooks for the source
2. Look up the source's receiver
3. Validate the webhook
4. Build the processor (receiver → interpreter → processor)
5. Process the event
6. Return the processor's response
"""

from dataclasses import dataclass

import structlog

from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.models.events import WebhookResponse
from donation_webhooks.models.exceptions import WebhookTerminated
from donation_webhooks.receivers.base import WebhookRequest
from donation_webhooks.receivers.registry import ReceiverRegistry

logger = structlog.get_logger(__name__)

MISSING_PROCESSOR_STATUS = 500


class DispatchOutcome:
    """How a webhook request ended."""

    UNKNOWN_SOURCE = "unknown_source"
    TERMINATED = "terminated"
    INVALID_WEBHOOK = "invalid_webhook"
    MISSING_PROCESSOR = "missing_processor"
    PROCESSED = "processed"
    NOT_PROCESSED = "not_processed"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a dispatch and the response to write, if any."""

    outcome: str
    response: WebhookResponse | None = None


class WebhookDispatcher:
    """Entry point tying the receiver registry and hooks together."""

    def __init__(self, registry: ReceiverRegistry, hooks: WebhookHooks | None = None) -> None:
        self.registry = registry
        self.hooks = hooks or WebhookHooks()

    def handle(self, source: str, request: WebhookRequest) -> DispatchResult:
        """
        Handle an incoming webhook for a source.

        Args:
            source: Webhook source identifier
            request: The inbound request

        Returns:
            DispatchResult. The response is None only for an unknown
            source, leaving the caller's default in place.
        """
        log = logger.bind(source=source)

        try:
            self.hooks.run_pre_dispatch(source, request)
        except WebhookTerminated as e:
            log.info("webhook_terminated_by_hook", status=e.status)
            return DispatchResult(
                outcome=DispatchOutcome.TERMINATED,
                response=WebhookResponse(status=e.status, message=e.message),
            )

        receiver = self.registry.get(source, request)

        if receiver is None:
            log.info("webhook_source_unknown")
            return DispatchResult(outcome=DispatchOutcome.UNKNOWN_SOURCE)

        if not receiver.is_valid_webhook():
            status = receiver.get_invalid_response_status()
            log.warning("webhook_invalid", status=status)
            return DispatchResult(
                outcome=DispatchOutcome.INVALID_WEBHOOK,
                response=WebhookResponse(
                    status=status,
                    message=receiver.get_invalid_response_message(),
                ),
            )

        processor = receiver.get_processor()

        if not processor:
            log.error("webhook_processor_missing")
            return DispatchResult(
                outcome=DispatchOutcome.MISSING_PROCESSOR,
                response=WebhookResponse(
                    status=MISSING_PROCESSOR_STATUS,
                    message=f"Missing webhook processor for {source}.",
                ),
            )

        processed = processor.process()
        response = processor.get_response()

        log.info(
            "webhook_processed",
            processor=type(processor).__name__,
            event_type=processor.interpreter.get_event_type(),
            processed=processed,
            status=response.status,
        )

        return DispatchResult(
            outcome=DispatchOutcome.PROCESSED if processed else DispatchOutcome.NOT_PROCESSED,
            response=response,
        )
