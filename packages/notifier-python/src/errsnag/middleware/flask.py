from __future__ import annotations

import logging
from typing import Any, Optional

from errsnag.client import Client

logger = logging.getLogger("errsnag")


def init_errsnag(app: Any, client: Optional[Client] = None, **kwargs: Any) -> Client:
    """Initialize errsnag error reporting for a Flask application.

    Args:
        app: Flask application instance.
        client: Client to report with. Built from ``kwargs`` when omitted.
        **kwargs: Arguments passed to the Client constructor.

    Returns:
        The Client used by the error handler.
    """
    from flask import request
    from werkzeug.exceptions import HTTPException

    if client is None:
        client = Client(**kwargs)

    @app.errorhandler(Exception)
    def handle_exception(e: Exception) -> Any:
        if isinstance(e, HTTPException):
            return e
        try:
            client.notify_request(e, request)
        except Exception as report_error:
            logger.warning(
                "Failed to report %s: %s: %s",
                type(e).__name__,
                type(report_error).__name__,
                report_error,
            )
        raise e

    return client
