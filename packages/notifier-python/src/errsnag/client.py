from __future__ import annotations

import dataclasses
import http.client
import logging
import os
import socket
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from errsnag import stacktrace
from errsnag.encoding import encode_payload
from errsnag.errors import ConfigurationError, ProtocolError, TransportError
from errsnag.event import App, Device, Event, ExceptionRecord, Notifier, Payload
from errsnag.request_info import request_dump, request_url
from errsnag.stacktrace import TraceFilter

logger = logging.getLogger("errsnag")

DEFAULT_ENDPOINT = "notify.bugsnag.com"
APPLICATION_JSON = "application/json"

DEFAULT_NOTIFIER = Notifier(
    name="errsnag",
    version="0.1.0",
    url="https://github.com/errsnag/errsnag-python",
)


def _coerce_error(value: Any) -> BaseException:
    if isinstance(value, BaseException):
        return value
    return RuntimeError(str(value))


class Client:
    """Builds events and delivers them to the error-tracking collector."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        use_ssl: bool = True,
        verbose: bool = False,
        indent: bool = False,
        release_stage: str = "production",
        notify_release_stages: Sequence[str] = ("production",),
        hostname: Optional[str] = None,
        os_version: str = "",
        app: Optional[App] = None,
        notifier: Notifier = DEFAULT_NOTIFIER,
        auto_notify: bool = True,
        trace_filter: Optional[TraceFilter] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("ERRSNAG_API_KEY", "")
        self.endpoint = endpoint or os.environ.get("ERRSNAG_ENDPOINT", DEFAULT_ENDPOINT)
        self.use_ssl = use_ssl
        self.verbose = verbose
        self.indent = indent
        self.release_stage = release_stage
        self.notify_release_stages = list(notify_release_stages)
        self.hostname = hostname if hostname is not None else socket.gethostname()
        self.os_version = os_version
        self.app = app
        self.notifier = notifier
        self.auto_notify = auto_notify
        self.trace_filter = trace_filter
        self.timeout = timeout

    @property
    def url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"

    def new(self, error: Any, error_class: Optional[str] = None) -> Event:
        """Build an event for ``error``; no I/O happens until :meth:`notify`.

        ``error_class`` overrides the class name taken from the error's type.
        """
        if error_class is None:
            error = _coerce_error(error)
            error_class = type(error).__name__
        trace = stacktrace.capture(
            error if isinstance(error, BaseException) else None,
            trace_filter=self.trace_filter,
        )
        app = None
        if self.app is not None:
            app = dataclasses.replace(
                self.app, release_stage=self.app.release_stage or self.release_stage
            )
        return Event(
            exceptions=[ExceptionRecord(error_class=error_class, message=str(error), stacktrace=trace)],
            release_stage=self.release_stage,
            os_version=self.os_version,
            app=app,
            device=Device(os_version=self.os_version, hostname=self.hostname or ""),
        )

    def should_notify(self, event: Event) -> bool:
        return event.release_stage in self.notify_release_stages

    def notify(self, event: Event) -> bool:
        """Send ``event`` if its release stage is one we report.

        Returns False when the event was filtered out by release stage and
        True once the collector accepted it. Delivery failures raise
        :class:`errsnag.errors.NotifyError`.
        """
        if not self.should_notify(event):
            logger.debug(
                "Skipping event for release stage %r (notifying %s)",
                event.release_stage,
                self.notify_release_stages,
            )
            return False
        if self.hostname:
            event.with_meta_data("host", "name", self.hostname)
        self.send([event])
        return True

    def notify_error(self, error: Any) -> bool:
        return self.notify(self.new(error))

    def notify_request(self, error: Any, request: Any) -> bool:
        """Report ``error`` using ``request``'s URL as context and its dump as metadata."""
        event = (
            self.new(error)
            .with_context(request_url(request))
            .with_meta_data("request", "dump", request_dump(request))
        )
        return self.notify(event)

    @contextmanager
    def capture_panic(self, request: Any = None) -> Iterator[None]:
        """Report any exception raised in the block, then re-raise it.

        Usable as ``with client.capture_panic(request):`` or as a decorator.
        """
        try:
            yield
        except Exception as e:
            try:
                if request is not None:
                    self.notify_request(e, request)
                else:
                    self.notify_error(e)
            except Exception as report_error:
                logger.warning(
                    "Failed to report %s: %s: %s",
                    type(e).__name__,
                    type(report_error).__name__,
                    report_error,
                )
            raise

    def send(self, events: List[Event]) -> None:
        """POST ``events`` in a single payload."""
        if not self.api_key:
            raise ConfigurationError("No API key provided")
        if not events:
            raise ValueError("no events to send")

        payload = Payload(api_key=self.api_key, notifier=self.notifier, events=list(events))
        data = encode_payload(payload, indent=self.indent)

        req = Request(self.url, data=data, method="POST")
        req.add_header("Content-Type", APPLICATION_JSON)

        logger.debug("Sending %d event(s) to %s", len(events), self.url)
        if self.verbose:
            logger.info("Payload: %s", data.decode("utf-8"))

        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        try:
            with urlopen(req, **kwargs) as resp:
                status = resp.status
                body = resp.read()
        except HTTPError as e:
            e.close()
            raise ProtocolError(e.code, e.reason) from e
        except (URLError, OSError, http.client.HTTPException, ValueError) as e:
            raise TransportError(f"Failed to reach {self.url}: {e}") from e

        if status != 200:
            raise ProtocolError(status)
        if self.verbose:
            logger.info("Response: %d %s", status, body.decode("utf-8", errors="replace"))
