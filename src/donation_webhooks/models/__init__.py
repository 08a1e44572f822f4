"""Domain models for the Donation Webhooks service."""

from donation_webhooks.models.events import (
    CanonicalEvent,
    DonationStatus,
    EventType,
    WebhookResponse,
)
from donation_webhooks.models.exceptions import (
    RegistryFrozenError,
    WebhookError,
    WebhookTerminated,
)

__all__ = [
    "CanonicalEvent",
    "DonationStatus",
    "EventType",
    "RegistryFrozenError",
    "WebhookError",
    "WebhookResponse",
    "WebhookTerminated",
]
