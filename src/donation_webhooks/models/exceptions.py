"""Custom exceptions for the Donation Webhooks service."""


class WebhookError(Exception):
    """Base exception for webhook-related errors."""

    pass


class WebhookTerminated(WebhookError):
    """
    Raised by a pre-dispatch hook to end the request early.

    The dispatcher answers with the carried status and message and skips
    the receiver pipeline entirely.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class RegistryFrozenError(WebhookError):
    """
    Raised when a receiver is registered after bootstrap froze the registry.
    """

    pass
