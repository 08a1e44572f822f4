"""
In-memory donation store.

Implements the donation entity protocols and DonationRepository without a
database. Used for local development and tests; production deployments
plug in their own repository.
"""

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import structlog

from donation_webhooks.models.events import DonationStatus

logger = structlog.get_logger(__name__)


@dataclass
class LogEntry:
    message: str
    created_at: datetime


class MemoryLog:
    """Append-only log of messages."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def add(self, message: str) -> None:
        self.entries.append(LogEntry(message=message, created_at=datetime.now(timezone.utc)))

    def messages(self) -> list[str]:
        return [entry.message for entry in self.entries]


@dataclass
class StoredDonation:
    """A donation held in memory."""

    id: int
    amount: Decimal
    status: str = DonationStatus.PENDING.value
    recurring_donation_id: int | None = None
    gateway_transaction_id: str | None = None
    refunded_amount: Decimal = Decimal("0")
    meta: dict[str, Any] = field(default_factory=dict)
    _log: MemoryLog = field(default_factory=MemoryLog, repr=False)

    def get_status(self) -> str:
        return self.status

    def update_status(self, status: str) -> None:
        if status == self.status:
            return
        self._log.add(f"Donation status updated from {self.status} to {status}.")
        self.status = status

    def log(self) -> MemoryLog:
        return self._log

    def set_gateway_transaction_id(self, transaction_id: str | None) -> None:
        if transaction_id:
            self.gateway_transaction_id = transaction_id

    def set_meta(self, key: str, value: Any) -> None:
        self.meta[key] = value

    def process_refund(self, amount: Decimal | None, message: str | None) -> None:
        """
        Record a refund.

        A missing amount is treated as a full refund. The donation is
        marked refunded once refunds cover its full amount.
        """
        refund = self.amount if amount is None else Decimal(amount)
        self.refunded_amount = min(self.amount, self.refunded_amount + refund)

        if message:
            self._log.add(message)

        if self.refunded_amount >= self.amount:
            self.update_status(DonationStatus.REFUNDED.value)


@dataclass
class StoredRecurringDonation:
    """A recurring donation held in memory."""

    id: int
    amount: Decimal
    store: "InMemoryDonationStore" = field(repr=False, compare=False)
    status: str = "pending"
    gateway_subscription_id: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    _log: MemoryLog = field(default_factory=MemoryLog, repr=False)

    def log(self) -> MemoryLog:
        return self._log

    def set_gateway_subscription_id(self, subscription_id: str | None) -> None:
        if subscription_id:
            self.gateway_subscription_id = subscription_id

    def set_meta(self, key: str, value: Any) -> None:
        self.meta[key] = value

    def create_renewal_donation(self, status: str) -> StoredDonation:
        return self.store.add_donation(
            amount=self.amount,
            status=status,
            recurring_donation_id=self.id,
        )

    def renew(self) -> None:
        if self.status != "active":
            self._log.add("Subscription activated.")
        self.status = "active"


class InMemoryDonationStore:
    """Thread-safe in-memory DonationRepository."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._donations: dict[int, StoredDonation] = {}
        self._recurring_donations: dict[int, StoredRecurringDonation] = {}

    def _next_id(self) -> int:
        # Caller holds the lock; skips IDs that were assigned explicitly
        for candidate in self._ids:
            if candidate not in self._donations and candidate not in self._recurring_donations:
                return candidate
        raise RuntimeError("ID sequence exhausted")

    def add_donation(
        self,
        amount: Decimal | int | str,
        status: str = DonationStatus.PENDING.value,
        donation_id: int | None = None,
        recurring_donation_id: int | None = None,
        gateway_transaction_id: str | None = None,
    ) -> StoredDonation:
        with self._lock:
            donation = StoredDonation(
                id=donation_id if donation_id is not None else self._next_id(),
                amount=Decimal(amount),
                status=status,
                recurring_donation_id=recurring_donation_id,
                gateway_transaction_id=gateway_transaction_id,
            )
            self._donations[donation.id] = donation

        logger.debug("donation_stored", donation_id=donation.id, status=status)
        return donation

    def add_recurring_donation(
        self,
        amount: Decimal | int | str,
        recurring_donation_id: int | None = None,
        gateway_subscription_id: str | None = None,
    ) -> StoredRecurringDonation:
        with self._lock:
            recurring_donation = StoredRecurringDonation(
                id=(
                    recurring_donation_id
                    if recurring_donation_id is not None
                    else self._next_id()
                ),
                amount=Decimal(amount),
                store=self,
                gateway_subscription_id=gateway_subscription_id,
            )
            self._recurring_donations[recurring_donation.id] = recurring_donation

        logger.debug("recurring_donation_stored", recurring_donation_id=recurring_donation.id)
        return recurring_donation

    def get_donation(self, donation_id: int) -> StoredDonation | None:
        with self._lock:
            return self._donations.get(donation_id)

    def find_donation_by_transaction_id(self, transaction_id: str) -> StoredDonation | None:
        with self._lock:
            for donation in self._donations.values():
                if donation.gateway_transaction_id == transaction_id:
                    return donation
        return None

    def get_recurring_donation(self, recurring_donation_id: int) -> StoredRecurringDonation | None:
        with self._lock:
            return self._recurring_donations.get(recurring_donation_id)

    def find_recurring_donation_by_subscription_id(
        self, subscription_id: str
    ) -> StoredRecurringDonation | None:
        with self._lock:
            for recurring_donation in self._recurring_donations.values():
                if recurring_donation.gateway_subscription_id == subscription_id:
                    return recurring_donation
        return None

    def donations_for(self, recurring_donation_id: int) -> list[StoredDonation]:
        with self._lock:
            return [
                donation
                for donation in self._donations.values()
                if donation.recurring_donation_id == recurring_donation_id
            ]
