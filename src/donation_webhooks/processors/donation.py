"""Processing of webhook events that concern a single donation."""

from typing import Any, Callable

import structlog

from donation_webhooks.domain.entities import Donation
from donation_webhooks.domain.meta import set_gateway_transaction_url
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.interpreters.base import DonationInterpreter
from donation_webhooks.models.events import DonationStatus, EventType
from donation_webhooks.processors.base import WebhookProcessor

logger = structlog.get_logger(__name__)

UNMATCHED_DONATION_MESSAGE = "Donation Webhook: Event could not be matched to a valid donation."

DONATION_MESSAGES: dict[EventType, str] = {
    EventType.REFUND: "Donation Webhook: Refund processed",
    EventType.FAILED_PAYMENT: "Donation Webhook: Donation marked as failed.",
    EventType.COMPLETED_PAYMENT: "Donation Webhook: Completed payment processed.",
    EventType.CANCELLATION: "Donation Webhook: Donation cancelled.",
    EventType.UPDATED_DONATION: "Donation Webhook: Donation updated.",
}


class DonationUpdater:
    """
    Applies donation events to a donation.

    Shared by DonationProcessor and SubscriptionProcessor so both run the
    same state transitions. A full update is the status transition, the
    gateway transaction data, then the interpreter's meta and logs.
    """

    def __init__(self, interpreter: DonationInterpreter) -> None:
        self.interpreter = interpreter
        self._transitions: dict[EventType, Callable[[Donation], None]] = {
            EventType.REFUND: self._refund,
            EventType.FAILED_PAYMENT: self._fail,
            EventType.COMPLETED_PAYMENT: self._complete,
            EventType.CANCELLATION: self._cancel,
            EventType.UPDATED_DONATION: self._update,
        }

    def handles(self, event_type: EventType) -> bool:
        return event_type in self._transitions

    def apply(self, event_type: EventType, donation: Donation) -> None:
        """Run the full update for an event type."""
        self.transition(event_type, donation)
        self.update_meta(donation)
        self.update_logs(donation)

    def transition(self, event_type: EventType, donation: Donation) -> None:
        """Apply the status change and save the gateway transaction data."""
        self._transitions[event_type](donation)

        # Updates don't carry a transaction of their own
        if event_type is not EventType.UPDATED_DONATION:
            self.save_gateway_transaction_data(donation)

    def _refund(self, donation: Donation) -> None:
        amount = self.interpreter.get_refund_amount()
        donation.process_refund(amount, self.interpreter.get_refund_log_message())
        logger.info("donation_refunded", donation_id=donation.id, refund_amount=str(amount))

    def _fail(self, donation: Donation) -> None:
        self._set_status(donation, DonationStatus.FAILED.value)

    def _complete(self, donation: Donation) -> None:
        self._set_status(donation, DonationStatus.COMPLETED.value)

    def _cancel(self, donation: Donation) -> None:
        self._set_status(donation, DonationStatus.CANCELLED.value)

    def _update(self, donation: Donation) -> None:
        status = self.interpreter.get_donation_status()

        if status and donation.get_status() != status:
            self._set_status(donation, status)

    @staticmethod
    def _set_status(donation: Donation, status: str) -> None:
        previous_status = donation.get_status()
        donation.update_status(status)
        logger.info(
            "donation_status_updated",
            donation_id=donation.id,
            previous_status=previous_status,
            status=status,
        )

    def save_gateway_transaction_data(self, donation: Donation) -> None:
        donation.set_gateway_transaction_id(self.interpreter.get_gateway_transaction_id())
        set_gateway_transaction_url(self.interpreter.get_gateway_transaction_url(), donation)

    def update_meta(self, donation: Donation) -> None:
        for meta_key, meta_value in self.interpreter.get_meta().items():
            donation.set_meta(meta_key, meta_value)

    def update_logs(self, donation: Donation) -> None:
        log = donation.log()

        for message in self.interpreter.get_logs():
            log.add(message)


class DonationProcessor(WebhookProcessor):
    """Processor for webhook events about one-off donations."""

    def __init__(self, interpreter: DonationInterpreter, hooks: WebhookHooks | None = None) -> None:
        super().__init__(interpreter)
        self.hooks = hooks or WebhookHooks()
        self.updater = DonationUpdater(interpreter)
        self._donation: Donation | None = None

    @property
    def donation(self) -> Donation | None:
        return self._donation

    def process(self) -> bool:
        self._donation = self.interpreter.get_donation()

        # Without a donation, there's nothing left to do
        if not self._donation:
            logger.info("donation_not_matched", event_type=self.interpreter.get_event_type())
            self.set_response(UNMATCHED_DONATION_MESSAGE)
            return False

        raw_event_type = self.interpreter.get_event_type()
        event_type = EventType.parse(raw_event_type)

        if event_type is not None and self.updater.handles(event_type):
            self.updater.apply(event_type, self._donation)
            self.set_response(DONATION_MESSAGES[event_type])
            return True

        return self._process_unmapped(raw_event_type, self._donation)

    def _process_unmapped(self, event_type: str, donation: Any) -> bool:
        handled = self.hooks.apply_donation_fallback(event_type, False, donation, self.interpreter)

        logger.info(
            "donation_event_fallback",
            event_type=event_type,
            donation_id=donation.id,
            handled=handled,
        )

        if handled:
            self.set_response(f"Donation Webhook: {event_type} event processed.")
        else:
            self.set_response(f"Donation Webhook: Event type {event_type} was not handled.")

        return handled
