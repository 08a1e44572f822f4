"""Application bootstrap: build the receiver registry once at startup."""

from functools import partial

import structlog

from donation_webhooks.config import Settings, settings as default_settings
from donation_webhooks.domain.entities import DonationRepository
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.receivers.registry import ReceiverRegistry
from donation_webhooks.receivers.stripe_receiver import StripeReceiver

logger = structlog.get_logger(__name__)


def build_registry(
    repository: DonationRepository,
    hooks: WebhookHooks,
    settings: Settings | None = None,
    freeze: bool = True,
) -> ReceiverRegistry:
    """
    Build the registry with the built-in gateway receivers.

    Args:
        repository: Donation repository the interpreters resolve against
        hooks: Extension hooks passed to the processors
        settings: Settings to read gateway configuration from
        freeze: Freeze the registry before returning it. Pass False to
            register additional receivers, then call freeze() yourself.

    Returns:
        ReceiverRegistry with "stripe" registered
    """
    settings = settings or default_settings
    registry = ReceiverRegistry()

    registry.register(
        "stripe",
        partial(
            StripeReceiver,
            repository=repository,
            webhook_secret=settings.stripe.webhook_secret,
            tolerance_seconds=settings.stripe.webhook_tolerance_seconds,
            dashboard_base_url=settings.stripe.dashboard_base_url,
            hooks=hooks,
        ),
    )

    if freeze:
        registry.freeze()

    logger.info("receiver_registry_built", sources=registry.sources(), frozen=registry.frozen)
    return registry
