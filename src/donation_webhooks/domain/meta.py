"""Helpers for persisting gateway dashboard URLs as entity metadata."""

from typing import Any

import structlog
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

logger = structlog.get_logger(__name__)

GATEWAY_TRANSACTION_URL_KEY = "_gateway_transaction_url"
GATEWAY_SUBSCRIPTION_URL_KEY = "_gateway_subscription_url"

_url_adapter = TypeAdapter(AnyHttpUrl)


def sanitize_url(url: str) -> str | None:
    """
    Clean up a gateway URL before it is stored.

    Returns:
        The stripped URL, or None if it is not a valid http(s) URL
    """
    candidate = url.strip()
    try:
        _url_adapter.validate_python(candidate)
    except ValidationError:
        return None
    return candidate


def _set_url_meta(url: str | None, entity: Any, key: str) -> bool:
    if not url:
        return False

    clean_url = sanitize_url(url)
    if clean_url is None:
        logger.warning("gateway_url_rejected", meta_key=key, entity_id=getattr(entity, "id", None))
        return False

    entity.set_meta(key, clean_url)
    return True


def set_gateway_transaction_url(url: str | None, donation: Any) -> bool:
    """
    Save the gateway's transaction URL against a donation.

    Args:
        url: URL of the transaction in the gateway account, or None
        donation: Donation to store the URL on

    Returns:
        True if the URL was stored, False if it was absent or invalid
    """
    return _set_url_meta(url, donation, GATEWAY_TRANSACTION_URL_KEY)


def set_gateway_subscription_url(url: str | None, recurring_donation: Any) -> bool:
    """
    Save the gateway's subscription URL against a recurring donation.

    Args:
        url: URL of the subscription in the gateway account, or None
        recurring_donation: Recurring donation to store the URL on

    Returns:
        True if the URL was stored, False if it was absent or invalid
    """
    return _set_url_meta(url, recurring_donation, GATEWAY_SUBSCRIPTION_URL_KEY)
