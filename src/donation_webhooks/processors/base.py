"""Base interface for webhook processors."""

from abc import ABC, abstractmethod

from donation_webhooks.interpreters.base import DonationInterpreter
from donation_webhooks.models.events import WebhookResponse

DEFAULT_RESPONSE_STATUS = 200


class WebhookProcessor(ABC):
    """
    Abstract base class for webhook processors.

    A processor takes one interpreter, applies the canonical event to the
    matching entities, and records the response to send to the gateway.
    Every path through process() must set a response.
    """

    def __init__(self, interpreter: DonationInterpreter) -> None:
        self._interpreter = interpreter
        self._response_message: str | None = None
        self._response_status: int | None = None

    @property
    def interpreter(self) -> DonationInterpreter:
        return self._interpreter

    @abstractmethod
    def process(self) -> bool:
        """
        Process the webhook event.

        Returns:
            True if the event was applied, False if it could not be matched
            to an entity or no handler took it.
        """
        pass

    def get_response_status(self) -> int | None:
        return self._response_status

    def get_response_message(self) -> str | None:
        return self._response_message

    def get_response(self) -> WebhookResponse:
        """
        Return the response recorded by process().

        Raises:
            RuntimeError: If called before process() set a response
        """
        if self._response_status is None or self._response_message is None:
            raise RuntimeError(f"{type(self).__name__} has not set a response")
        return WebhookResponse(status=self._response_status, message=self._response_message)

    def set_response(self, message: str, http_status: int = DEFAULT_RESPONSE_STATUS) -> None:
        """
        Record the response to send.

        The interpreter's overrides win when they are set; message and
        status are resolved independently.
        """
        self._response_message = self._interpreter.get_response_message() or message
        self._response_status = self._interpreter.get_response_status() or http_status
