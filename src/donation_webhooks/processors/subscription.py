"""Processing of webhook events that concern a recurring donation."""

from collections.abc import Callable

import structlog

from donation_webhooks.domain.entities import Donation, RecurringDonation
from donation_webhooks.domain.meta import set_gateway_subscription_url
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.interpreters.base import SubscriptionInterpreter
from donation_webhooks.models.events import DonationStatus, EventType
from donation_webhooks.processors.base import WebhookProcessor
from donation_webhooks.processors.donation import DONATION_MESSAGES, DonationUpdater

logger = structlog.get_logger(__name__)

UNMATCHED_SUBSCRIPTION_MESSAGE = (
    "Subscription Webhook: Event could not be matched to a valid subscription."
)
UNMATCHED_SUBSCRIPTION_DONATION_MESSAGE = (
    "Subscription Webhook: Event could not be matched to a valid donation."
)
RENEWAL_MESSAGE = "Subscription Webhook: Renewal processed"
FIRST_PAYMENT_MESSAGE = "Subscription Webhook: First payment processed"


class SubscriptionProcessor(WebhookProcessor):
    """
    Processor for webhook events about recurring donations.

    Adds renewal and first payment handling on top of the donation events,
    which are delegated to the same DonationUpdater the DonationProcessor
    uses.
    """

    def __init__(
        self, interpreter: SubscriptionInterpreter, hooks: WebhookHooks | None = None
    ) -> None:
        super().__init__(interpreter)
        self.hooks = hooks or WebhookHooks()
        self.updater = DonationUpdater(interpreter)
        self._donation: Donation | None = None
        self._recurring_donation: RecurringDonation | None = None
        self._handlers: dict[EventType, Callable[[], bool]] = {
            EventType.RENEWAL: self.process_renewal,
            EventType.FIRST_PAYMENT: self.process_first_payment,
        }

    @property
    def interpreter(self) -> SubscriptionInterpreter:
        return self._interpreter

    @property
    def donation(self) -> Donation | None:
        return self._donation

    @property
    def recurring_donation(self) -> RecurringDonation | None:
        return self._recurring_donation

    def process(self) -> bool:
        self._recurring_donation = self.interpreter.get_recurring_donation()

        # Without a recurring donation, there's nothing left to do
        if not self._recurring_donation:
            logger.info(
                "recurring_donation_not_matched", event_type=self.interpreter.get_event_type()
            )
            self.set_response(UNMATCHED_SUBSCRIPTION_MESSAGE)
            return False

        # Renewals have no donation yet; the renewal handler creates it
        self._donation = self.interpreter.get_donation()

        if not self._donation and not self.interpreter.is_renewal():
            return self._donation_not_matched()

        raw_event_type = self.interpreter.get_event_type()
        event_type = EventType.parse(raw_event_type)

        if event_type in self._handlers:
            return self._handlers[event_type]()

        if event_type is not None and self.updater.handles(event_type):
            if not self._donation:
                return self._donation_not_matched()

            self.updater.apply(event_type, self._donation)
            self.set_response(DONATION_MESSAGES[event_type])
            return True

        return self._process_unmapped(raw_event_type)

    def process_renewal(self) -> bool:
        recurring_donation = self._recurring_donation
        self._donation = recurring_donation.create_renewal_donation(
            status=DonationStatus.COMPLETED.value
        )

        self.save_gateway_subscription_data()
        self.updater.save_gateway_transaction_data(self._donation)
        self.updater.update_meta(self._donation)
        self.updater.update_logs(self._donation)

        recurring_donation.log().add(f"Renewal processed. Donation #{self._donation.id}")

        logger.info(
            "subscription_renewed",
            recurring_donation_id=recurring_donation.id,
            donation_id=self._donation.id,
        )

        self.set_response(RENEWAL_MESSAGE)
        return True

    def process_first_payment(self) -> bool:
        if not self._donation:
            return self._donation_not_matched()

        # Mark the initial payment complete, then activate the subscription
        self.updater.transition(EventType.COMPLETED_PAYMENT, self._donation)
        self._recurring_donation.renew()

        self.save_gateway_subscription_data()
        self.updater.update_meta(self._donation)
        self.updater.update_logs(self._donation)

        logger.info(
            "subscription_activated",
            recurring_donation_id=self._recurring_donation.id,
            donation_id=self._donation.id,
        )

        self.set_response(FIRST_PAYMENT_MESSAGE)
        return True

    def save_gateway_subscription_data(self) -> None:
        self._recurring_donation.set_gateway_subscription_id(
            self.interpreter.get_gateway_subscription_id()
        )
        set_gateway_subscription_url(
            self.interpreter.get_gateway_subscription_url(), self._recurring_donation
        )

    def _donation_not_matched(self) -> bool:
        logger.info(
            "subscription_donation_not_matched",
            event_type=self.interpreter.get_event_type(),
            recurring_donation_id=self._recurring_donation.id,
        )
        self.set_response(UNMATCHED_SUBSCRIPTION_DONATION_MESSAGE)
        return False

    def _process_unmapped(self, event_type: str) -> bool:
        handled = self.hooks.apply_subscription_fallback(
            event_type, False, self._recurring_donation, self.interpreter
        )

        logger.info(
            "subscription_event_fallback",
            event_type=event_type,
            recurring_donation_id=self._recurring_donation.id,
            handled=handled,
        )

        if handled:
            self.set_response(f"Subscription Webhook: {event_type} event processed.")
        else:
            self.set_response(f"Subscription Webhook: Event type {event_type} was not handled.")

        return handled
