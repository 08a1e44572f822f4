"""
Protocols for the donation entities the webhook core mutates.

Donations and recurring donations are owned by the surrounding system.
The core only reads and mutates them through the operations declared
here, so any persistence layer that provides these methods can be used.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DonationLog(Protocol):
    """Append-only audit log attached to a donation or recurring donation."""

    def add(self, message: str) -> None:
        """Append a message to the log."""
        ...


@runtime_checkable
class Donation(Protocol):
    """A single payment record with a lifecycle status."""

    @property
    def id(self) -> int: ...

    def get_status(self) -> str: ...

    def update_status(self, status: str) -> None: ...

    def log(self) -> DonationLog: ...

    def set_gateway_transaction_id(self, transaction_id: str | None) -> None: ...

    def set_meta(self, key: str, value: Any) -> None:
        """Store a metadata value, replacing any previous value for the key."""
        ...

    def process_refund(self, amount: Decimal | None, message: str | None) -> None:
        """Apply a refund. Full vs. partial refund logic belongs to the entity."""
        ...


@runtime_checkable
class RecurringDonation(Protocol):
    """A recurring-payment agreement that spawns renewal donations."""

    @property
    def id(self) -> int: ...

    def log(self) -> DonationLog: ...

    def set_gateway_subscription_id(self, subscription_id: str | None) -> None: ...

    def set_meta(self, key: str, value: Any) -> None: ...

    def create_renewal_donation(self, status: str) -> Donation:
        """Create and return a new donation for this subscription."""
        ...

    def renew(self) -> None:
        """Mark the subscription as active."""
        ...


@runtime_checkable
class DonationRepository(Protocol):
    """Lookups used by gateway interpreters to resolve webhook payloads."""

    def get_donation(self, donation_id: int) -> Donation | None: ...

    def find_donation_by_transaction_id(self, transaction_id: str) -> Donation | None: ...

    def get_recurring_donation(self, recurring_donation_id: int) -> RecurringDonation | None: ...

    def find_recurring_donation_by_subscription_id(
        self, subscription_id: str
    ) -> RecurringDonation | None: ...
