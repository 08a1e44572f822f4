"""Donation stores."""

from donation_webhooks.store.memory import (
    InMemoryDonationStore,
    StoredDonation,
    StoredRecurringDonation,
)

__all__ = [
    "InMemoryDonationStore",
    "StoredDonation",
    "StoredRecurringDonation",
]
