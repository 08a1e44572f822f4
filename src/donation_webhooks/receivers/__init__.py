"""Webhook receivers and their registry."""

from donation_webhooks.receivers.base import WebhookReceiver, WebhookRequest
from donation_webhooks.receivers.registry import ReceiverRegistry
from donation_webhooks.receivers.stripe_receiver import StripeReceiver

__all__ = [
    "ReceiverRegistry",
    "StripeReceiver",
    "WebhookReceiver",
    "WebhookRequest",
]
