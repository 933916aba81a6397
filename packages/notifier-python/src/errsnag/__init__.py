"""errsnag - error notifier for Python applications."""

from __future__ import annotations

from typing import Any, ContextManager, Optional

from errsnag.client import DEFAULT_ENDPOINT, DEFAULT_NOTIFIER, Client
from errsnag.errors import (
    ConfigurationError,
    NotifyError,
    ProtocolError,
    SerializationError,
    TransportError,
)
from errsnag.event import App, Device, Event, ExceptionRecord, Notifier, Payload, StackFrame

__version__ = "0.1.0"

_client: Optional[Client] = None


def init(**kwargs: Any) -> Client:
    """Initialize the default client.

    Args:
        **kwargs: Arguments passed to the Client constructor. The API key
            defaults to the ERRSNAG_API_KEY env var.

    Returns:
        The initialized Client instance. When ``auto_notify`` is enabled
        (the default) uncaught exceptions are reported through it.
    """
    global _client
    _client = Client(**kwargs)
    if _client.auto_notify:
        from errsnag.excepthook import install
        install(_client)
    return _client


def get_client() -> Client:
    global _client
    if _client is None:
        _client = Client()
    return _client


def new(error: Any, error_class: Optional[str] = None) -> Event:
    return get_client().new(error, error_class=error_class)


def notify(event: Event) -> bool:
    return get_client().notify(event)


def notify_error(error: Any) -> bool:
    """Report ``error`` with the default client."""
    return get_client().notify_error(error)


def notify_request(error: Any, request: Any) -> bool:
    return get_client().notify_request(error, request)


def capture_panic(request: Any = None) -> ContextManager[None]:
    return get_client().capture_panic(request)


__all__ = [
    "__version__",
    "init",
    "get_client",
    "new",
    "notify",
    "notify_error",
    "notify_request",
    "capture_panic",
    "Client",
    "DEFAULT_ENDPOINT",
    "DEFAULT_NOTIFIER",
    "App",
    "Device",
    "Event",
    "ExceptionRecord",
    "Notifier",
    "Payload",
    "StackFrame",
    "NotifyError",
    "ConfigurationError",
    "SerializationError",
    "TransportError",
    "ProtocolError",
]
