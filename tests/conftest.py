"""Pytest configuration and shared fixtures for all tests.

This module provides shared test fixtures including:
- An in-memory donation store with sample donations
- Stripe event payload builders
- Stripe signature generation for receiver and API tests
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from typing import Any, Callable

import pytest

from donation_webhooks.config import Settings, StripeWebhookSettings
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.store.memory import InMemoryDonationStore

TEST_WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def store():
    """Create an empty in-memory donation store."""
    return InMemoryDonationStore()


@pytest.fixture
def donation(store):
    """Create a pending donation with ID 42."""
    return store.add_donation(
        amount=Decimal("25.00"),
        donation_id=42,
        gateway_transaction_id="pi_test_42",
    )


@pytest.fixture
def recurring_donation(store):
    """Create a pending recurring donation linked to a Stripe subscription."""
    return store.add_recurring_donation(
        amount=Decimal("10.00"),
        recurring_donation_id=7,
        gateway_subscription_id="sub_test_7",
    )


@pytest.fixture
def hooks():
    """Create an empty hook registry."""
    return WebhookHooks()


@pytest.fixture
def test_settings():
    """Settings with a known Stripe signing secret."""
    return Settings(
        environment="test",
        stripe=StripeWebhookSettings(webhook_secret=TEST_WEBHOOK_SECRET),
    )


@pytest.fixture
def stripe_event() -> Callable[..., dict[str, Any]]:
    """Build Stripe event payloads.

    Usage:
        event = stripe_event("payment_intent.succeeded", {"id": "pi_1", ...})
    """

    def _build(
        event_type: str,
        obj: dict[str, Any],
        event_id: str = "evt_test_1",
        livemode: bool = False,
        previous_attributes: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"object": obj}
        if previous_attributes is not None:
            data["previous_attributes"] = previous_attributes
        return {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "livemode": livemode,
            "data": data,
        }

    return _build


def sign_stripe_payload(payload: str, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Compute a Stripe-Signature header value for a payload."""
    timestamp = timestamp if timestamp is not None else int(time.time())
    signed_payload = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def signed_stripe_request() -> Callable[..., tuple[bytes, dict[str, str]]]:
    """Serialize a Stripe event and return (body, headers) with a valid signature."""

    def _build(event: dict[str, Any], secret: str = TEST_WEBHOOK_SECRET) -> tuple[bytes, dict[str, str]]:
        payload = json.dumps(event)
        headers = {
            "Stripe-Signature": sign_stripe_payload(payload, secret),
            "Content-Type": "application/json",
        }
        return payload.encode("utf-8"), headers

    return _build
