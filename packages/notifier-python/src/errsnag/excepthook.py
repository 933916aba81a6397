from __future__ import annotations

import logging
import sys
import threading
from types import TracebackType
from typing import Optional, Type

from errsnag.client import Client

logger = logging.getLogger("errsnag")

_original_excepthook = sys.excepthook
_original_threading_excepthook = getattr(threading, "excepthook", None)


def _report(client: Client, exc_value: BaseException) -> None:
    try:
        client.notify_error(exc_value)
    except Exception as e:
        logger.warning("Failed to report uncaught %s: %s: %s", type(exc_value).__name__, type(e).__name__, e)


def install(client: Client) -> None:
    """Install sys.excepthook and threading.excepthook to report uncaught exceptions."""

    def errsnag_excepthook(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_tb: Optional[TracebackType],
    ) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            _report(client, exc_value)
        _original_excepthook(exc_type, exc_value, exc_tb)

    sys.excepthook = errsnag_excepthook

    if hasattr(threading, "excepthook"):
        def errsnag_threading_excepthook(args: threading.ExceptHookArgs) -> None:
            if args.exc_value is not None:
                _report(client, args.exc_value)
            if _original_threading_excepthook is not None:
                _original_threading_excepthook(args)

        threading.excepthook = errsnag_threading_excepthook


def uninstall() -> None:
    """Restore the hooks that were active when errsnag was imported."""
    sys.excepthook = _original_excepthook
    if _original_threading_excepthook is not None:
        threading.excepthook = _original_threading_excepthook
