"""Donation entity protocols and metadata helpers."""

from donation_webhooks.domain.entities import (
    Donation,
    DonationLog,
    DonationRepository,
    RecurringDonation,
)
from donation_webhooks.domain.meta import (
    GATEWAY_SUBSCRIPTION_URL_KEY,
    GATEWAY_TRANSACTION_URL_KEY,
    set_gateway_subscription_url,
    set_gateway_transaction_url,
)

__all__ = [
    "Donation",
    "DonationLog",
    "DonationRepository",
    "GATEWAY_SUBSCRIPTION_URL_KEY",
    "GATEWAY_TRANSACTION_URL_KEY",
    "RecurringDonation",
    "set_gateway_subscription_url",
    "set_gateway_transaction_url",
]
