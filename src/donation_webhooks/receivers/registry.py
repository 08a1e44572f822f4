"""
Receiver registry.

Maps a webhook source identifier (the `{source}` path segment of the
webhook URL) to the factory that builds a receiver for one request.
The registry is populated at bootstrap and frozen before serving.
"""

from typing import Any, Callable

import structlog

from donation_webhooks.models.exceptions import RegistryFrozenError
from donation_webhooks.receivers.base import WebhookReceiver, WebhookRequest

logger = structlog.get_logger(__name__)

ReceiverFactory = Callable[[WebhookRequest], Any]


class ReceiverRegistry:
    """Registry of webhook receiver factories keyed by source."""

    def __init__(self) -> None:
        self._receivers: dict[str, ReceiverFactory] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, source: str, factory: ReceiverFactory) -> None:
        """
        Register a receiver factory for a webhook source.

        A later registration for the same source replaces the earlier one.

        Args:
            source: Webhook source identifier (e.g., "stripe")
            factory: Callable taking a WebhookRequest and returning a
                WebhookReceiver, typically the receiver class itself or a
                functools.partial binding its dependencies

        Raises:
            RegistryFrozenError: If the registry has been frozen
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register receiver for {source}: registry is frozen"
            )

        if source in self._receivers:
            logger.info("receiver_replaced", source=source)

        self._receivers[source] = factory
        logger.info("receiver_registered", source=source)

    def get(self, source: str, request: WebhookRequest) -> WebhookReceiver | None:
        """
        Build the receiver for a webhook source.

        Returns:
            The receiver, or None if the source is not registered or its
            factory raised or did not produce a WebhookReceiver
        """
        factory = self._receivers.get(source)
        if factory is None:
            return None

        try:
            receiver = factory(request)
        except Exception:
            logger.exception("receiver_factory_failed", source=source)
            return None

        if not isinstance(receiver, WebhookReceiver):
            logger.error(
                "receiver_factory_invalid",
                source=source,
                receiver_type=type(receiver).__name__,
            )
            return None

        return receiver

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    def sources(self) -> list[str]:
        """Get the sorted list of registered sources."""
        return sorted(self._receivers)
