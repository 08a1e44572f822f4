"""Webhook processors: canonical events → donation state transitions."""

from donation_webhooks.processors.base import WebhookProcessor
from donation_webhooks.processors.donation import DonationProcessor, DonationUpdater
from donation_webhooks.processors.subscription import SubscriptionProcessor

__all__ = [
    "DonationProcessor",
    "DonationUpdater",
    "SubscriptionProcessor",
    "WebhookProcessor",
]
