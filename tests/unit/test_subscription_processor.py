"""Unit tests for SubscriptionProcessor."""

from unittest.mock import MagicMock

from donation_webhooks.domain.meta import GATEWAY_SUBSCRIPTION_URL_KEY
from donation_webhooks.interpreters import SubscriptionEventInterpreter
from donation_webhooks.models import CanonicalEvent
from donation_webhooks.processors import SubscriptionProcessor
from donation_webhooks.processors.subscription import (
    FIRST_PAYMENT_MESSAGE,
    RENEWAL_MESSAGE,
    UNMATCHED_SUBSCRIPTION_DONATION_MESSAGE,
    UNMATCHED_SUBSCRIPTION_MESSAGE,
)

SUBSCRIPTION_URL = "https://dashboard.stripe.com/test/subscriptions/sub_live"


def make_processor(hooks=None, **event_fields) -> SubscriptionProcessor:
    event_fields.setdefault("gateway_subscription_id", "sub_live")
    event_fields.setdefault("gateway_subscription_url", SUBSCRIPTION_URL)
    return SubscriptionProcessor(SubscriptionEventInterpreter(CanonicalEvent(**event_fields)), hooks)


class TestSubscriptionProcessorPreChecks:
    """Tests for the recurring donation and donation pre-checks."""

    def test_missing_recurring_donation(self, donation):
        """Test that a missing recurring donation short-circuits."""
        processor = make_processor(event_type="first_payment", donation=donation)

        assert processor.process() is False
        assert processor.get_response_message() == UNMATCHED_SUBSCRIPTION_MESSAGE
        assert processor.get_response_status() == 200
        assert donation.status == "pending"

    def test_missing_donation_when_not_renewal(self, recurring_donation):
        """Test that a non-renewal event needs a donation."""
        processor = make_processor(
            event_type="first_payment",
            recurring_donation=recurring_donation,
        )

        assert processor.process() is False
        assert processor.get_response_message() == UNMATCHED_SUBSCRIPTION_DONATION_MESSAGE
        assert recurring_donation.status == "pending"

    def test_shared_event_without_donation_on_renewal(self, recurring_donation):
        """Test that a donation event flagged as renewal still needs a donation."""
        processor = make_processor(
            event_type="failed_payment",
            recurring_donation=recurring_donation,
            is_renewal=True,
        )

        assert processor.process() is False
        assert processor.get_response_message() == UNMATCHED_SUBSCRIPTION_DONATION_MESSAGE


class TestSubscriptionRenewal:
    """Tests for renewal events."""

    def test_renewal_creates_completed_donation(self, store, recurring_donation):
        """Test that a renewal without a donation creates one."""
        processor = make_processor(
            event_type="renewal",
            recurring_donation=recurring_donation,
            is_renewal=True,
            gateway_transaction_id="pi_renewal",
            logs=["Renewal invoice paid"],
            meta={"_stripe_invoice_id": "in_1"},
        )

        assert processor.process() is True

        renewals = store.donations_for(recurring_donation.id)
        assert len(renewals) == 1
        renewal = renewals[0]
        assert processor.donation is renewal
        assert renewal.status == "completed"
        assert renewal.amount == recurring_donation.amount
        assert renewal.gateway_transaction_id == "pi_renewal"
        assert renewal.meta["_stripe_invoice_id"] == "in_1"
        assert renewal.log().messages() == ["Renewal invoice paid"]
        assert "_stripe_invoice_id" not in recurring_donation.meta

    def test_renewal_updates_subscription(self, store, recurring_donation):
        """Test that subscription data and the renewal note land on the subscription."""
        processor = make_processor(
            event_type="renewal",
            recurring_donation=recurring_donation,
            is_renewal=True,
        )

        processor.process()

        renewal = store.donations_for(recurring_donation.id)[0]
        assert recurring_donation.gateway_subscription_id == "sub_live"
        assert recurring_donation.meta[GATEWAY_SUBSCRIPTION_URL_KEY] == SUBSCRIPTION_URL
        assert recurring_donation.log().messages()[-1] == f"Renewal processed. Donation #{renewal.id}"
        assert processor.get_response_message() == RENEWAL_MESSAGE
        assert processor.get_response_status() == 200

    def test_renewal_requests_completed_status(self):
        """Test that the renewal donation is created with completed status."""
        recurring_donation = MagicMock()
        recurring_donation.id = 3
        recurring_donation.create_renewal_donation.return_value.id = 99
        processor = make_processor(
            event_type="renewal",
            recurring_donation=recurring_donation,
            is_renewal=True,
        )

        processor.process()

        recurring_donation.create_renewal_donation.assert_called_once_with(status="completed")
        recurring_donation.log.return_value.add.assert_called_once_with(
            "Renewal processed. Donation #99"
        )


class TestSubscriptionFirstPayment:
    """Tests for first payment events."""

    def test_first_payment_completes_and_activates(self, donation, recurring_donation):
        """Test that the donation completes and the subscription activates."""
        processor = make_processor(
            event_type="first_payment",
            donation=donation,
            recurring_donation=recurring_donation,
            gateway_transaction_id="pi_first",
            logs=["Subscription started"],
            meta={"_stripe_customer_id": "cus_1"},
        )

        assert processor.process() is True
        assert donation.status == "completed"
        assert donation.gateway_transaction_id == "pi_first"
        assert recurring_donation.status == "active"
        assert recurring_donation.gateway_subscription_id == "sub_live"
        assert donation.meta["_stripe_customer_id"] == "cus_1"
        assert processor.get_response_message() == FIRST_PAYMENT_MESSAGE

    def test_first_payment_logs_once(self, donation, recurring_donation):
        """Test that interpreter logs are appended once."""
        processor = make_processor(
            event_type="first_payment",
            donation=donation,
            recurring_donation=recurring_donation,
            logs=["Subscription started"],
        )

        processor.process()

        assert donation.log().messages().count("Subscription started") == 1


class TestSubscriptionSharedEvents:
    """Tests for donation events arriving through the subscription pipeline."""

    def test_failed_payment_marks_donation(self, donation, recurring_donation):
        """Test that failed_payment reuses the donation handling."""
        processor = make_processor(
            event_type="failed_payment",
            donation=donation,
            recurring_donation=recurring_donation,
        )

        assert processor.process() is True
        assert donation.status == "failed"
        assert processor.get_response_message() == "Donation Webhook: Donation marked as failed."


class TestSubscriptionUnmapped:
    """Tests for subscription event types without a built-in handler."""

    def test_fallback_receives_recurring_donation(self, hooks, donation, recurring_donation):
        """Test that the fallback gets the recurring donation, not the donation."""
        fallback = MagicMock(return_value=True)
        hooks.subscription_fallback("customer.subscription.deleted")(fallback)
        processor = make_processor(
            hooks,
            event_type="customer.subscription.deleted",
            donation=donation,
            recurring_donation=recurring_donation,
        )

        assert processor.process() is True
        fallback.assert_called_once_with(False, recurring_donation, processor.interpreter)
        assert processor.get_response_message() == (
            "Subscription Webhook: customer.subscription.deleted event processed."
        )

    def test_unhandled_sets_default_response(self, donation, recurring_donation):
        """Test the explicit response for an unhandled subscription event."""
        processor = make_processor(
            event_type="customer.subscription.paused",
            donation=donation,
            recurring_donation=recurring_donation,
        )

        assert processor.process() is False
        assert processor.get_response_status() == 200
        assert processor.get_response_message() == (
            "Subscription Webhook: Event type customer.subscription.paused was not handled."
        )

    def test_donation_fallbacks_are_not_used(self, hooks, donation, recurring_donation):
        """Test that donation fallbacks are separate from subscription fallbacks."""
        donation_fallback = MagicMock(return_value=True)
        hooks.donation_fallback("paused")(donation_fallback)
        processor = make_processor(
            hooks,
            event_type="paused",
            donation=donation,
            recurring_donation=recurring_donation,
        )

        assert processor.process() is False
        donation_fallback.assert_not_called()
