# errors.py

from typing import Optional


class RouterlineError(Exception):
    """Base class for all routerline errors."""


class ConfigError(RouterlineError):
    """Configuration is missing or invalid."""


class ChatClientError(RouterlineError):
    """Base class for errors that end a turn."""


class RequestBuildError(ChatClientError):
    """The request could not be serialized or addressed."""


class TransportError(ChatClientError):
    """Connection failure, timeout, or a read error mid-stream."""


class UpstreamError(ChatClientError):
    """
    The API answered with a non-success status.

    The full response body is kept verbatim as diagnostic detail.
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error ({status_code}): {body}")


class ProtocolError(RouterlineError):
    """A stream event could not be decoded. Never fatal to a turn."""

    def __init__(self, message: str, payload: Optional[str] = None):
        self.payload = payload
        super().__init__(message)


class TurnInProgressError(RouterlineError):
    """A new turn was submitted while another is still in flight."""
