"""Payment gateway webhooks for donations and recurring donations."""

from donation_webhooks.dispatcher import DispatchOutcome, DispatchResult, WebhookDispatcher
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.models import CanonicalEvent, EventType, WebhookResponse
from donation_webhooks.receivers import ReceiverRegistry, WebhookReceiver, WebhookRequest

__version__ = "0.1.0"

__all__ = [
    "CanonicalEvent",
    "DispatchOutcome",
    "DispatchResult",
    "EventType",
    "ReceiverRegistry",
    "WebhookDispatcher",
    "WebhookHooks",
    "WebhookReceiver",
    "WebhookRequest",
    "WebhookResponse",
]
