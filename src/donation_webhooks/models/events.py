"""Canonical webhook event models."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Built-in canonical event types.

    Interpreters may return any other string; those are routed to the
    fallback hooks instead of a built-in handler.
    """

    REFUND = "refund"
    FAILED_PAYMENT = "failed_payment"
    COMPLETED_PAYMENT = "completed_payment"
    CANCELLATION = "cancellation"
    UPDATED_DONATION = "updated_donation"
    RENEWAL = "renewal"
    FIRST_PAYMENT = "first_payment"

    @classmethod
    def parse(cls, value: str) -> "EventType | None":
        """Return the matching EventType, or None for an unmapped type."""
        try:
            return cls(value)
        except ValueError:
            return None


class DonationStatus(str, Enum):
    """Donation lifecycle status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


@dataclass
class CanonicalEvent:
    """
    Gateway-agnostic record of what a webhook reported.

    Gateways that parse their payload once can build one of these and hand
    it to an EventInterpreter instead of implementing every accessor.
    """

    event_type: str

    donation: Any | None = None
    recurring_donation: Any | None = None
    is_renewal: bool = False

    gateway_transaction_id: str | None = None
    gateway_transaction_url: str | None = None
    gateway_subscription_id: str | None = None
    gateway_subscription_url: str | None = None

    refund_amount: Decimal | None = None
    refund_log_message: str | None = None
    donation_status: str | None = None
    subscription_status: str | None = None

    logs: Sequence[str] = field(default_factory=tuple)
    meta: Mapping[str, Any] = field(default_factory=dict)

    response_message: str | None = None
    response_status: int | None = None

    def __post_init__(self) -> None:
        """Validate the event type and normalize enum values."""
        if isinstance(self.event_type, EventType):
            self.event_type = self.event_type.value
        if not self.event_type:
            raise ValueError("event_type must be a non-empty string")
        self.logs = tuple(self.logs)


@dataclass(frozen=True)
class WebhookResponse:
    """HTTP status and body to send back to the gateway."""

    status: int
    message: str
