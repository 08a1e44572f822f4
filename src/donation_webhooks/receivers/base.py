"""Base interface for webhook receivers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field

from donation_webhooks.interpreters.base import DonationInterpreter
from donation_webhooks.processors.base import WebhookProcessor

DEFAULT_INVALID_RESPONSE_STATUS = 400
DEFAULT_INVALID_RESPONSE_MESSAGE = "Invalid webhook."


@dataclass(frozen=True)
class WebhookRequest:
    """
    Transport-neutral view of an inbound webhook request.

    Header names are lower-cased so receivers can look them up without
    caring how the gateway capitalised them.
    """

    source: str
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "headers", {name.lower(): value for name, value in self.headers.items()}
        )

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)


class WebhookReceiver(ABC):
    """
    Abstract base class for gateway webhook receivers.

    A receiver is created for one request. It checks that the request is
    an authentic webhook from its gateway and wires the interpreter and
    processor that will handle it.
    """

    def __init__(self, request: WebhookRequest) -> None:
        self.request = request

    @abstractmethod
    def is_valid_webhook(self) -> bool:
        """Check the request's authenticity and shape."""
        pass

    @abstractmethod
    def get_interpreter(self) -> DonationInterpreter | None:
        """Return the interpreter for this request, or None."""
        pass

    @abstractmethod
    def get_processor(self) -> WebhookProcessor | None:
        """
        Return the processor for this request.

        Returns:
            A processor wired with this request's interpreter, or None if
            one cannot be built
        """
        pass

    def get_invalid_response_status(self) -> int:
        return DEFAULT_INVALID_RESPONSE_STATUS

    def get_invalid_response_message(self) -> str:
        return DEFAULT_INVALID_RESPONSE_MESSAGE
