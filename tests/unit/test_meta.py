"""Unit tests for gateway URL metadata helpers."""

from unittest.mock import MagicMock

from donation_webhooks.domain.meta import (
    GATEWAY_SUBSCRIPTION_URL_KEY,
    GATEWAY_TRANSACTION_URL_KEY,
    sanitize_url,
    set_gateway_subscription_url,
    set_gateway_transaction_url,
)


def test_transaction_url_is_stored(donation):
    """Test that a valid URL is stored under the transaction URL key."""
    stored = set_gateway_transaction_url("https://dashboard.stripe.com/payments/pi_1", donation)

    assert stored is True
    assert donation.meta[GATEWAY_TRANSACTION_URL_KEY] == "https://dashboard.stripe.com/payments/pi_1"


def test_subscription_url_is_stored(recurring_donation):
    """Test that a valid URL is stored under the subscription URL key."""
    stored = set_gateway_subscription_url(
        "https://dashboard.stripe.com/subscriptions/sub_1", recurring_donation
    )

    assert stored is True
    assert recurring_donation.meta[GATEWAY_SUBSCRIPTION_URL_KEY] == (
        "https://dashboard.stripe.com/subscriptions/sub_1"
    )


def test_absent_url_is_a_no_op():
    """Test that None and empty URLs are not stored."""
    entity = MagicMock()

    assert set_gateway_transaction_url(None, entity) is False
    assert set_gateway_subscription_url("", entity) is False
    entity.set_meta.assert_not_called()


def test_invalid_url_is_rejected():
    """Test that non-http URLs are not stored."""
    entity = MagicMock()

    assert set_gateway_transaction_url("javascript:alert(1)", entity) is False
    entity.set_meta.assert_not_called()


def test_sanitize_url_strips_whitespace():
    """Test that surrounding whitespace is removed."""
    assert sanitize_url("  https://example.com/payments/1 \n") == "https://example.com/payments/1"
    assert sanitize_url("not a url") is None
