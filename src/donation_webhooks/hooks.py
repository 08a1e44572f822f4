"""
Extension points for the webhook pipeline.

Extensions register callbacks against a webhook source or an event type:

    hooks = WebhookHooks()

    @hooks.pre_dispatch("paypal")
    def log_paypal_ipn(source, request):
        ...

    @hooks.donation_fallback("dispute_opened")
    def handle_dispute(handled, donation, interpreter):
        donation.log().add("Dispute opened")
        return True

Fallback callbacks form a filter chain: each receives the `handled` flag
returned by the previous one and returns the (possibly updated) flag.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable

import structlog

if TYPE_CHECKING:
    from donation_webhooks.interpreters.base import DonationInterpreter
    from donation_webhooks.receivers.base import WebhookRequest

logger = structlog.get_logger(__name__)

PreDispatchHook = Callable[[str, "WebhookRequest"], Any]
FallbackHook = Callable[[bool, Any, "DonationInterpreter"], bool]


class WebhookHooks:
    """Registry of pre-dispatch actions and unmapped-event fallbacks."""

    def __init__(self) -> None:
        self._pre_dispatch: dict[str, list[PreDispatchHook]] = defaultdict(list)
        self._donation_fallbacks: dict[str, list[FallbackHook]] = defaultdict(list)
        self._subscription_fallbacks: dict[str, list[FallbackHook]] = defaultdict(list)

    def pre_dispatch(self, source: str) -> Callable[[PreDispatchHook], PreDispatchHook]:
        """
        Decorator to run a callback before a source's webhook is dispatched.

        The callback's return value is ignored. To end the request early it
        may raise WebhookTerminated.
        """

        def decorator(func: PreDispatchHook) -> PreDispatchHook:
            self._pre_dispatch[source].append(func)
            logger.debug("pre_dispatch_hook_registered", source=source, hook=func.__name__)
            return func

        return decorator

    def donation_fallback(self, event_type: str) -> Callable[[FallbackHook], FallbackHook]:
        """Decorator to handle a donation event type with no built-in handler."""

        def decorator(func: FallbackHook) -> FallbackHook:
            self._donation_fallbacks[event_type].append(func)
            logger.debug("donation_fallback_registered", event_type=event_type, hook=func.__name__)
            return func

        return decorator

    def subscription_fallback(self, event_type: str) -> Callable[[FallbackHook], FallbackHook]:
        """Decorator to handle a subscription event type with no built-in handler."""

        def decorator(func: FallbackHook) -> FallbackHook:
            self._subscription_fallbacks[event_type].append(func)
            logger.debug(
                "subscription_fallback_registered", event_type=event_type, hook=func.__name__
            )
            return func

        return decorator

    def run_pre_dispatch(self, source: str, request: WebhookRequest) -> None:
        for hook in self._pre_dispatch.get(source, ()):
            hook(source, request)

    def apply_donation_fallback(
        self,
        event_type: str,
        handled: bool,
        donation: Any,
        interpreter: DonationInterpreter,
    ) -> bool:
        """Run the donation fallbacks for an event type and return `handled`."""
        return self._apply(self._donation_fallbacks, event_type, handled, donation, interpreter)

    def apply_subscription_fallback(
        self,
        event_type: str,
        handled: bool,
        recurring_donation: Any,
        interpreter: DonationInterpreter,
    ) -> bool:
        """Run the subscription fallbacks for an event type and return `handled`."""
        return self._apply(
            self._subscription_fallbacks, event_type, handled, recurring_donation, interpreter
        )

    @staticmethod
    def _apply(
        registry: dict[str, list[FallbackHook]],
        event_type: str,
        handled: bool,
        entity: Any,
        interpreter: DonationInterpreter,
    ) -> bool:
        for hook in registry.get(event_type, ()):
            handled = bool(hook(handled, entity, interpreter))
        return handled
