"""Webhook interpreters: gateway payload → canonical event vocabulary."""

from donation_webhooks.interpreters.base import DonationInterpreter, SubscriptionInterpreter
from donation_webhooks.interpreters.event import EventInterpreter, SubscriptionEventInterpreter
from donation_webhooks.interpreters.stripe_interpreter import (
    StripeDonationInterpreter,
    StripeSubscriptionInterpreter,
    is_subscription_event,
)

__all__ = [
    "DonationInterpreter",
    "EventInterpreter",
    "StripeDonationInterpreter",
    "StripeSubscriptionInterpreter",
    "SubscriptionEventInterpreter",
    "SubscriptionInterpreter",
    "is_subscription_event",
]
