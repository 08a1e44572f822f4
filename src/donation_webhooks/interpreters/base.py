"""Base interfaces for webhook interpreters."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from donation_webhooks.domain.entities import Donation, RecurringDonation


class DonationInterpreter(ABC):
    """
    Abstract base class for gateway-specific donation webhook interpreters.

    An interpreter turns one gateway payload into the canonical event
    vocabulary the processors understand. Every accessor is a pure query
    that returns None (or an empty collection) when the payload does not
    carry the value; none of them raise for "not applicable".
    """

    @abstractmethod
    def get_event_type(self) -> str:
        """
        Return the canonical event type used for dispatch.

        Built-in types are listed in EventType. Any other non-empty string
        is routed to the fallback hooks.
        """
        pass

    @abstractmethod
    def get_donation(self) -> Donation | None:
        """Return the donation matching the webhook, or None."""
        pass

    def get_refund_amount(self) -> Decimal | None:
        return None

    def get_refund_log_message(self) -> str | None:
        return None

    def get_donation_status(self) -> str | None:
        return None

    def get_gateway_transaction_id(self) -> str | None:
        return None

    def get_gateway_transaction_url(self) -> str | None:
        return None

    def get_logs(self) -> Iterable[str]:
        """Return the messages to append to the donation log, in order."""
        return ()

    def get_meta(self) -> Mapping[str, Any]:
        """Return metadata to store verbatim against the donation."""
        return {}

    def get_response_message(self) -> str | None:
        """Override for the processor's default response message."""
        return None

    def get_response_status(self) -> int | None:
        """Override for the processor's default response status."""
        return None


class SubscriptionInterpreter(DonationInterpreter):
    """Interpreter for webhooks about recurring donations."""

    @abstractmethod
    def get_recurring_donation(self) -> RecurringDonation | None:
        """Return the recurring donation matching the webhook, or None."""
        pass

    def is_renewal(self) -> bool:
        """Whether the event is a renewal charge with no existing donation."""
        return False

    def get_gateway_subscription_id(self) -> str | None:
        return None

    def get_gateway_subscription_url(self) -> str | None:
        return None

    def get_subscription_status(self) -> str | None:
        return None
