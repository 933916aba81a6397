from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from errsnag.client import Client

logger = logging.getLogger("errsnag")


class ErrsnagMiddleware:
    """Django middleware that reports unhandled exceptions to the collector."""

    def __init__(self, get_response: Callable[..., Any], client: Optional[Client] = None) -> None:
        self.get_response = get_response
        self.client = client if client is not None else Client()

    def __call__(self, request: Any) -> Any:
        return self.get_response(request)

    def process_exception(self, request: Any, exception: Exception) -> None:
        try:
            self.client.notify_request(exception, request)
        except Exception as e:
            logger.warning("Failed to report %s: %s: %s", type(exception).__name__, type(e).__name__, e)
