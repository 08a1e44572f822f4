"""Unit tests for canonical event models and event interpreters."""

from decimal import Decimal

import pytest

from donation_webhooks.interpreters import EventInterpreter, SubscriptionEventInterpreter
from donation_webhooks.models import CanonicalEvent, EventType, WebhookResponse


class TestEventType:
    """Tests for EventType parsing."""

    def test_parse_built_in_types(self):
        """Test that every built-in tag parses to its enum member."""
        for member in EventType:
            assert EventType.parse(member.value) is member

    def test_parse_unmapped_type_returns_none(self):
        """Test that unknown tags are reported as unmapped."""
        assert EventType.parse("dispute_opened") is None
        assert EventType.parse("") is None


class TestCanonicalEvent:
    """Tests for CanonicalEvent validation."""

    def test_empty_event_type_raises_error(self):
        """Test that an empty event type is rejected."""
        with pytest.raises(ValueError) as exc_info:
            CanonicalEvent(event_type="")

        assert "event_type must be a non-empty string" in str(exc_info.value)

    def test_enum_event_type_is_normalized(self):
        """Test that EventType members are stored as their string value."""
        event = CanonicalEvent(event_type=EventType.REFUND)

        assert event.event_type == "refund"

    def test_defaults(self):
        """Test that optional fields default to absent values."""
        event = CanonicalEvent(event_type="completed_payment")

        assert event.donation is None
        assert event.is_renewal is False
        assert event.logs == ()
        assert event.meta == {}
        assert event.response_message is None
        assert event.response_status is None


class TestEventInterpreter:
    """Tests for interpreters backed by a CanonicalEvent."""

    def test_accessors_return_event_fields(self, donation):
        """Test that each accessor returns the matching event field."""
        event = CanonicalEvent(
            event_type="refund",
            donation=donation,
            gateway_transaction_id="pi_1",
            gateway_transaction_url="https://dashboard.stripe.com/test/payments/pi_1",
            refund_amount=Decimal("5.00"),
            refund_log_message="Partial refund",
            donation_status="refunded",
            logs=["one", "two"],
            meta={"key": "value"},
            response_message="Custom",
            response_status=202,
        )
        interpreter = EventInterpreter(event)

        assert interpreter.get_event_type() == "refund"
        assert interpreter.get_donation() is donation
        assert interpreter.get_gateway_transaction_id() == "pi_1"
        assert interpreter.get_refund_amount() == Decimal("5.00")
        assert interpreter.get_refund_log_message() == "Partial refund"
        assert interpreter.get_donation_status() == "refunded"
        assert interpreter.get_meta() == {"key": "value"}
        assert interpreter.get_response_message() == "Custom"
        assert interpreter.get_response_status() == 202

    def test_logs_are_restartable(self):
        """Test that get_logs() can be iterated more than once."""
        interpreter = EventInterpreter(CanonicalEvent(event_type="refund", logs=["a", "b"]))

        assert list(interpreter.get_logs()) == ["a", "b"]
        assert list(interpreter.get_logs()) == ["a", "b"]

    def test_subscription_accessors(self, recurring_donation):
        """Test the subscription-specific accessors."""
        event = CanonicalEvent(
            event_type="renewal",
            recurring_donation=recurring_donation,
            is_renewal=True,
            gateway_subscription_id="sub_1",
            gateway_subscription_url="https://dashboard.stripe.com/subscriptions/sub_1",
            subscription_status="active",
        )
        interpreter = SubscriptionEventInterpreter(event)

        assert interpreter.get_recurring_donation() is recurring_donation
        assert interpreter.is_renewal() is True
        assert interpreter.get_donation() is None
        assert interpreter.get_gateway_subscription_id() == "sub_1"
        assert interpreter.get_subscription_status() == "active"


def test_webhook_response_is_immutable():
    """Test that a WebhookResponse cannot be modified."""
    response = WebhookResponse(status=200, message="ok")

    with pytest.raises(AttributeError):
        response.status = 500
