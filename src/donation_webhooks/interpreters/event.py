"""Interpreters backed by a pre-built CanonicalEvent."""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from donation_webhooks.interpreters.base import DonationInterpreter, SubscriptionInterpreter
from donation_webhooks.models.events import CanonicalEvent


class EventInterpreter(DonationInterpreter):
    """Serve every accessor straight from a CanonicalEvent."""

    def __init__(self, event: CanonicalEvent) -> None:
        self.event = event

    def get_event_type(self) -> str:
        return self.event.event_type

    def get_donation(self) -> Any | None:
        return self.event.donation

    def get_refund_amount(self) -> Decimal | None:
        return self.event.refund_amount

    def get_refund_log_message(self) -> str | None:
        return self.event.refund_log_message

    def get_donation_status(self) -> str | None:
        return self.event.donation_status

    def get_gateway_transaction_id(self) -> str | None:
        return self.event.gateway_transaction_id

    def get_gateway_transaction_url(self) -> str | None:
        return self.event.gateway_transaction_url

    def get_logs(self) -> Iterable[str]:
        return iter(self.event.logs)

    def get_meta(self) -> Mapping[str, Any]:
        return self.event.meta

    def get_response_message(self) -> str | None:
        return self.event.response_message

    def get_response_status(self) -> int | None:
        return self.event.response_status


class SubscriptionEventInterpreter(EventInterpreter, SubscriptionInterpreter):
    """EventInterpreter for recurring donation webhooks."""

    def get_recurring_donation(self) -> Any | None:
        return self.event.recurring_donation

    def is_renewal(self) -> bool:
        return self.event.is_renewal

    def get_gateway_subscription_id(self) -> str | None:
        return self.event.gateway_subscription_id

    def get_gateway_subscription_url(self) -> str | None:
        return self.event.gateway_subscription_url

    def get_subscription_status(self) -> str | None:
        return self.event.subscription_status
