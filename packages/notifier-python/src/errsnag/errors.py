from __future__ import annotations

from typing import Optional


class NotifyError(Exception):
    """Base class for failures while delivering an event to the collector."""


class ConfigurationError(NotifyError):
    """The client is missing configuration required to send (e.g. the API key)."""


class SerializationError(NotifyError):
    """The payload could not be encoded as JSON."""


class TransportError(NotifyError):
    """The collector could not be reached."""


class ProtocolError(NotifyError):
    """The collector answered with a status other than 200."""

    def __init__(self, status_code: int, reason: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason
        message = f"Unexpected status code: {status_code}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
