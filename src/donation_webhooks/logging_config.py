"""Structured logging configuration using structlog."""

import logging
import sys
import uuid

import structlog

from donation_webhooks.config import Settings, settings as default_settings

# Environments that get machine-readable output
JSON_ENVIRONMENTS = frozenset({"production", "staging"})


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the service.

    Console output everywhere except JSON_ENVIRONMENTS. The service name
    and environment are bound to every log line.
    """
    settings = settings or default_settings
    level = logging.getLevelName(settings.log_level.upper())

    if settings.environment in JSON_ENVIRONMENTS:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    # Route stdlib loggers (uvicorn, stripe) to stdout at the same level
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=settings.service_name,
        environment=settings.environment,
    )


def bind_webhook_context(source: str, delivery_id: str | None = None) -> str:
    """Bind the webhook source and a delivery ID for the current request.

    Returns:
        The delivery ID, generated when the caller has none
    """
    delivery_id = delivery_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(webhook_source=source, delivery_id=delivery_id)
    return delivery_id


def clear_webhook_context() -> None:
    structlog.contextvars.unbind_contextvars("webhook_source", "delivery_id")
