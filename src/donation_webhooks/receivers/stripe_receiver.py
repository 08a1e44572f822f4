"""
Stripe webhook receiver.

Verifies the `Stripe-Signature` header against the endpoint's signing
secret and routes invoice/subscription events to the subscription
pipeline and everything else to the donation pipeline.

Reference:
- https://docs.stripe.com/webhooks#verify-events
"""

import json
from collections.abc import Mapping
from typing import Any

import stripe
import structlog

from donation_webhooks.domain.entities import DonationRepository
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.interpreters.stripe_interpreter import (
    DEFAULT_DASHBOARD_URL,
    StripeDonationInterpreter,
    StripeSubscriptionInterpreter,
    is_subscription_event,
)
from donation_webhooks.processors.base import WebhookProcessor
from donation_webhooks.processors.donation import DonationProcessor
from donation_webhooks.processors.subscription import SubscriptionProcessor
from donation_webhooks.receivers.base import WebhookReceiver, WebhookRequest

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "Stripe-Signature"


class StripeReceiver(WebhookReceiver):
    """Receiver for webhooks sent by Stripe."""

    def __init__(
        self,
        request: WebhookRequest,
        repository: DonationRepository,
        webhook_secret: str,
        tolerance_seconds: int = stripe.Webhook.DEFAULT_TOLERANCE,
        dashboard_base_url: str = DEFAULT_DASHBOARD_URL,
        hooks: WebhookHooks | None = None,
    ) -> None:
        super().__init__(request)
        self.repository = repository
        self.webhook_secret = webhook_secret
        self.tolerance_seconds = tolerance_seconds
        self.dashboard_base_url = dashboard_base_url
        self.hooks = hooks or WebhookHooks()
        self._invalid_message = "Invalid Stripe webhook."
        self._event: Mapping[str, Any] | None = None

    def is_valid_webhook(self) -> bool:
        """
        Verify the signature, then decode the event.

        Uses verify_header rather than stripe.Webhook.construct_event so the
        interpreters work on the plain decoded dict, not a StripeObject.
        """
        signature = self.request.header(SIGNATURE_HEADER)

        if not self.webhook_secret:
            logger.error("stripe_webhook_secret_not_configured")
            self._invalid_message = "Stripe webhook secret is not configured."
            return False

        if not signature:
            logger.warning("stripe_webhook_missing_signature")
            self._invalid_message = "Missing Stripe-Signature header."
            return False

        try:
            payload = self.request.body.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("stripe_webhook_body_not_utf8")
            self._invalid_message = "Invalid Stripe event payload."
            return False

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature,
                self.webhook_secret,
                self.tolerance_seconds,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("stripe_signature_verification_failed", error=str(e))
            self._invalid_message = "Invalid Stripe signature."
            return False

        event = self._decode_event()
        if event is None:
            self._invalid_message = "Invalid Stripe event payload."
            return False

        logger.info(
            "stripe_webhook_verified",
            stripe_event_id=event.get("id"),
            stripe_event_type=event.get("type"),
        )
        return True

    def _decode_event(self) -> Mapping[str, Any] | None:
        if self._event is None:
            try:
                event = json.loads(self.request.body)
            except (ValueError, UnicodeDecodeError) as e:
                logger.warning("stripe_event_decode_failed", error=str(e))
                return None

            if not isinstance(event, dict):
                logger.warning("stripe_event_not_an_object")
                return None

            self._event = event

        return self._event

    def get_interpreter(self) -> StripeDonationInterpreter | None:
        event = self._decode_event()
        if event is None or not event.get("type"):
            return None

        interpreter_class = (
            StripeSubscriptionInterpreter
            if is_subscription_event(event["type"])
            else StripeDonationInterpreter
        )
        return interpreter_class(event, self.repository, self.dashboard_base_url)

    def get_processor(self) -> WebhookProcessor | None:
        interpreter = self.get_interpreter()
        if interpreter is None:
            logger.warning("stripe_event_type_missing")
            return None

        if isinstance(interpreter, StripeSubscriptionInterpreter):
            return SubscriptionProcessor(interpreter, self.hooks)
        return DonationProcessor(interpreter, self.hooks)

    def get_invalid_response_message(self) -> str:
        return self._invalid_message
