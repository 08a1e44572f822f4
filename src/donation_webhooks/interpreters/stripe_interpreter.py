"""
Stripe webhook interpreters.

Translate verified Stripe event payloads (plain dicts decoded from the
request body) into the canonical event vocabulary.

Reference:
- https://docs.stripe.com/api/events/types
- https://docs.stripe.com/billing/subscriptions/webhooks
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

import structlog

from donation_webhooks.domain.entities import Donation, DonationRepository, RecurringDonation
from donation_webhooks.interpreters.base import DonationInterpreter, SubscriptionInterpreter
from donation_webhooks.models.events import DonationStatus, EventType

logger = structlog.get_logger(__name__)

DEFAULT_DASHBOARD_URL = "https://dashboard.stripe.com"

# Currencies Stripe charges in whole units
# See: https://docs.stripe.com/currencies#zero-decimal
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
        "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
    }
)

# Stripe event types with a direct canonical equivalent
DONATION_EVENT_TYPES: dict[str, EventType] = {
    "payment_intent.succeeded": EventType.COMPLETED_PAYMENT,
    "payment_intent.payment_failed": EventType.FAILED_PAYMENT,
    "payment_intent.canceled": EventType.CANCELLATION,
    "charge.refunded": EventType.REFUND,
    "checkout.session.async_payment_succeeded": EventType.COMPLETED_PAYMENT,
    "checkout.session.async_payment_failed": EventType.FAILED_PAYMENT,
}

SUBSCRIPTION_EVENT_PREFIXES = ("invoice.", "customer.subscription.")


def is_subscription_event(stripe_event_type: str) -> bool:
    """Whether a Stripe event type concerns a subscription."""
    return stripe_event_type.startswith(SUBSCRIPTION_EVENT_PREFIXES)


def from_minor_units(amount: int, currency: str) -> Decimal:
    """Convert a Stripe integer amount to a decimal amount in major units."""
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(amount)
    return (Decimal(amount) / Decimal(100)).quantize(Decimal("0.01"))


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class StripeDonationInterpreter(DonationInterpreter):
    """
    Interpreter for one-off donation events sent by Stripe.

    Donations are matched by the `donation_id` metadata set when the
    PaymentIntent or Checkout Session was created, falling back to a
    lookup by the PaymentIntent ID stored as the gateway transaction ID.
    """

    def __init__(
        self,
        event: Mapping[str, Any],
        repository: DonationRepository,
        dashboard_base_url: str = DEFAULT_DASHBOARD_URL,
    ) -> None:
        self.event = event
        self.repository = repository
        self.dashboard_base_url = dashboard_base_url.rstrip("/")
        self._donation: Donation | None = None
        self._donation_resolved = False

    @property
    def stripe_event_type(self) -> str:
        return self.event.get("type") or ""

    @property
    def stripe_object(self) -> Mapping[str, Any]:
        return (self.event.get("data") or {}).get("object") or {}

    @property
    def livemode(self) -> bool:
        return bool(self.event.get("livemode", False))

    def metadata(self) -> Mapping[str, Any]:
        return self.stripe_object.get("metadata") or {}

    def dashboard_url(self, path: str) -> str:
        mode = "" if self.livemode else "test/"
        return f"{self.dashboard_base_url}/{mode}{path}"

    def get_event_type(self) -> str:
        event_type = DONATION_EVENT_TYPES.get(self.stripe_event_type)
        if event_type is not None:
            return event_type.value

        if self.stripe_event_type == "checkout.session.completed":
            if self.stripe_object.get("payment_status") == "paid":
                return EventType.COMPLETED_PAYMENT.value

        return self.stripe_event_type

    def get_donation(self) -> Donation | None:
        if not self._donation_resolved:
            self._donation = self._resolve_donation()
            self._donation_resolved = True
        return self._donation

    def _resolve_donation(self) -> Donation | None:
        donation_id = _to_int(self.metadata().get("donation_id"))
        if donation_id is not None:
            donation = self.repository.get_donation(donation_id)
            if donation is not None:
                return donation

        transaction_id = self.get_gateway_transaction_id()
        if transaction_id:
            return self.repository.find_donation_by_transaction_id(transaction_id)

        logger.info(
            "stripe_donation_not_identified",
            stripe_event_id=self.event.get("id"),
            stripe_event_type=self.stripe_event_type,
        )
        return None

    def get_gateway_transaction_id(self) -> str | None:
        obj = self.stripe_object
        if obj.get("object") == "payment_intent":
            return obj.get("id")
        return obj.get("payment_intent") or obj.get("id")

    def get_gateway_transaction_url(self) -> str | None:
        transaction_id = self.get_gateway_transaction_id()
        if not transaction_id:
            return None
        return self.dashboard_url(f"payments/{transaction_id}")

    def previous_attributes(self) -> Mapping[str, Any]:
        return (self.event.get("data") or {}).get("previous_attributes") or {}

    def get_refund_amount(self) -> Decimal | None:
        """
        Amount refunded by this event.

        `amount_refunded` is the charge's running total, so the total
        before this event (from `previous_attributes`) is subtracted.
        """
        amount_refunded = _to_int(self.stripe_object.get("amount_refunded"))
        if amount_refunded is None:
            return None
        previously_refunded = _to_int(self.previous_attributes().get("amount_refunded")) or 0
        return from_minor_units(
            max(amount_refunded - previously_refunded, 0),
            self.stripe_object.get("currency") or "",
        )

    def get_refund_log_message(self) -> str | None:
        amount = self.get_refund_amount()
        if amount is None:
            return None
        currency = (self.stripe_object.get("currency") or "").upper()
        if currency:
            return f"Refund of {amount} {currency} processed in Stripe."
        return f"Refund of {amount} processed in Stripe."

    def get_donation_status(self) -> str | None:
        status = self.stripe_object.get("status")
        return {
            "succeeded": DonationStatus.COMPLETED.value,
            "canceled": DonationStatus.CANCELLED.value,
            "requires_payment_method": DonationStatus.FAILED.value,
            "processing": DonationStatus.PENDING.value,
        }.get(status)

    def get_logs(self) -> Iterable[str]:
        obj = self.stripe_object
        event_type = self.get_event_type()

        if event_type == EventType.FAILED_PAYMENT.value:
            error = obj.get("last_payment_error") or {}
            reason = error.get("message") or "no reason given"
            yield f"Stripe payment failed: {reason}"
        elif event_type == EventType.CANCELLATION.value:
            reason = obj.get("cancellation_reason") or "no reason given"
            yield f"Stripe payment cancelled: {reason}"
        elif event_type == EventType.COMPLETED_PAYMENT.value:
            yield f"Stripe payment {self.get_gateway_transaction_id()} succeeded."

    def get_meta(self) -> Mapping[str, Any]:
        meta: dict[str, Any] = {}
        if self.event.get("id"):
            meta["_stripe_event_id"] = self.event["id"]
        if self.stripe_object.get("customer"):
            meta["_stripe_customer_id"] = self.stripe_object["customer"]
        return meta


class StripeSubscriptionInterpreter(StripeDonationInterpreter, SubscriptionInterpreter):
    """
    Interpreter for Stripe Billing events (invoices and subscriptions).

    `invoice.paid` is the first payment when the invoice was created with
    the subscription and a renewal otherwise.
    """

    def __init__(
        self,
        event: Mapping[str, Any],
        repository: DonationRepository,
        dashboard_base_url: str = DEFAULT_DASHBOARD_URL,
    ) -> None:
        super().__init__(event, repository, dashboard_base_url)
        self._recurring_donation: RecurringDonation | None = None
        self._recurring_donation_resolved = False

    @property
    def billing_reason(self) -> str | None:
        return self.stripe_object.get("billing_reason")

    def _subscription_details(self) -> Mapping[str, Any]:
        obj = self.stripe_object
        details = obj.get("subscription_details")
        if details:
            return details
        # Newer API versions nest the details under the invoice parent
        return (obj.get("parent") or {}).get("subscription_details") or {}

    def metadata(self) -> Mapping[str, Any]:
        obj = self.stripe_object
        if obj.get("object") == "subscription":
            return obj.get("metadata") or {}
        return self._subscription_details().get("metadata") or obj.get("metadata") or {}

    def get_event_type(self) -> str:
        if self.stripe_event_type == "invoice.paid":
            if self.billing_reason == "subscription_create":
                return EventType.FIRST_PAYMENT.value
            return EventType.RENEWAL.value

        if self.stripe_event_type == "invoice.payment_failed":
            return EventType.FAILED_PAYMENT.value

        return self.stripe_event_type

    def is_renewal(self) -> bool:
        return self.get_event_type() == EventType.RENEWAL.value

    def get_donation(self) -> Donation | None:
        # Renewal donations are created by the processor
        if self.is_renewal():
            return None
        return super().get_donation()

    def get_recurring_donation(self) -> RecurringDonation | None:
        if not self._recurring_donation_resolved:
            self._recurring_donation = self._resolve_recurring_donation()
            self._recurring_donation_resolved = True
        return self._recurring_donation

    def _resolve_recurring_donation(self) -> RecurringDonation | None:
        subscription_id = self.get_gateway_subscription_id()
        if subscription_id:
            recurring_donation = self.repository.find_recurring_donation_by_subscription_id(
                subscription_id
            )
            if recurring_donation is not None:
                return recurring_donation

        recurring_donation_id = _to_int(self.metadata().get("recurring_donation_id"))
        if recurring_donation_id is not None:
            return self.repository.get_recurring_donation(recurring_donation_id)

        return None

    def get_gateway_transaction_id(self) -> str | None:
        obj = self.stripe_object
        if obj.get("object") == "subscription":
            return None
        return obj.get("payment_intent") or obj.get("charge") or obj.get("id")

    def get_gateway_transaction_url(self) -> str | None:
        obj = self.stripe_object
        if obj.get("object") == "invoice" and not obj.get("payment_intent"):
            invoice_id = obj.get("id")
            return self.dashboard_url(f"invoices/{invoice_id}") if invoice_id else None
        return super().get_gateway_transaction_url()

    def get_gateway_subscription_id(self) -> str | None:
        obj = self.stripe_object
        if obj.get("object") == "subscription":
            return obj.get("id")
        subscription = obj.get("subscription") or self._subscription_details().get("subscription")
        if isinstance(subscription, Mapping):
            return subscription.get("id")
        return subscription

    def get_gateway_subscription_url(self) -> str | None:
        subscription_id = self.get_gateway_subscription_id()
        if not subscription_id:
            return None
        return self.dashboard_url(f"subscriptions/{subscription_id}")

    def get_subscription_status(self) -> str | None:
        obj = self.stripe_object
        if obj.get("object") == "subscription":
            return obj.get("status")
        return None

    def get_logs(self) -> Iterable[str]:
        event_type = self.get_event_type()
        invoice_id = self.stripe_object.get("id")

        if event_type == EventType.RENEWAL.value:
            yield f"Stripe renewal invoice {invoice_id} paid."
        elif event_type == EventType.FIRST_PAYMENT.value:
            yield f"Stripe subscription {self.get_gateway_subscription_id()} activated."
        elif event_type == EventType.FAILED_PAYMENT.value:
            yield f"Stripe invoice {invoice_id} payment failed."

    def get_meta(self) -> Mapping[str, Any]:
        meta = dict(super().get_meta())
        if self.stripe_object.get("object") == "invoice" and self.stripe_object.get("id"):
            meta["_stripe_invoice_id"] = self.stripe_object["id"]
        return meta
