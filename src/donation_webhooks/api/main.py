"""FastAPI application entry point for the Donation Webhooks service."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from fastapi import FastAPI

from donation_webhooks.api.routes import router
from donation_webhooks.bootstrap import build_registry
from donation_webhooks.config import settings
from donation_webhooks.dispatcher import WebhookDispatcher
from donation_webhooks.domain.entities import DonationRepository
from donation_webhooks.hooks import WebhookHooks
from donation_webhooks.logging_config import configure_logging
from donation_webhooks.receivers.registry import ReceiverRegistry
from donation_webhooks.store.memory import InMemoryDonationStore

# Configure logging at module level
configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    logger.info(
        "starting_donation_webhooks",
        environment=settings.environment,
        sources=app.state.dispatcher.registry.sources(),
    )

    yield

    logger.info("donation_webhooks_shutdown_complete")


def create_app(
    registry: ReceiverRegistry | None = None,
    hooks: WebhookHooks | None = None,
    repository: DonationRepository | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        registry: Receiver registry. Built from settings when omitted.
        hooks: Extension hooks shared by the dispatcher and processors
        repository: Donation repository used by the built-in receivers.
            Defaults to an in-memory store.

    Returns:
        Configured FastAPI application
    """
    hooks = hooks or WebhookHooks()

    if registry is None:
        registry = build_registry(repository or InMemoryDonationStore(), hooks)

    app = FastAPI(
        title="Donation Webhooks",
        description="Payment gateway webhooks for donations and recurring donations",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.dispatcher = WebhookDispatcher(registry, hooks)
    app.include_router(router)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.service_name,
            "environment": settings.environment,
            "sources": registry.sources(),
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "Donation Webhooks",
            "version": "0.1.0",
            "status": "running",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "donation_webhooks.api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )
