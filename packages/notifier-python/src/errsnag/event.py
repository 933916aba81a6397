"""Wire model for events sent to the collector.

Every type maps one-to-one onto an object of the JSON payload. ``to_dict``
emits the wire keys and leaves out optional fields that are empty;
``from_dict`` reads a decoded document back into the model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

PAYLOAD_VERSION = "2"


@dataclass(frozen=True)
class Notifier:
    """Identity of this library, sent with every payload."""

    name: str
    version: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version, "url": self.url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Notifier":
        return cls(name=data["name"], version=data["version"], url=data["url"])


@dataclass
class App:
    version: str = ""
    release_stage: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "releaseStage": self.release_stage}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "App":
        return cls(version=data.get("version", ""), release_stage=data.get("releaseStage", ""))


@dataclass
class Device:
    os_version: str = ""
    hostname: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"osVersion": self.os_version, "hostname": self.hostname}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Device":
        return cls(os_version=data.get("osVersion", ""), hostname=data.get("hostname", ""))


@dataclass
class StackFrame:
    """One call site of a stack trace."""

    file: str
    line_number: int
    method: str
    in_project: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file": self.file,
            "lineNumber": self.line_number,
            "method": self.method,
        }
        if self.in_project:
            data["inProject"] = True
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StackFrame":
        return cls(
            file=data["file"],
            line_number=int(data["lineNumber"]),
            method=data["method"],
            in_project=bool(data.get("inProject", False)),
        )


@dataclass
class ExceptionRecord:
    """One causal error of an event: class name, message and trace."""

    error_class: str
    message: str = ""
    stacktrace: List[StackFrame] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"errorClass": self.error_class}
        if self.message:
            data["message"] = self.message
        if self.stacktrace:
            data["stacktrace"] = [frame.to_dict() for frame in self.stacktrace]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExceptionRecord":
        return cls(
            error_class=data["errorClass"],
            message=data.get("message", ""),
            stacktrace=[StackFrame.from_dict(f) for f in data.get("stacktrace", [])],
        )


@dataclass
class Event:
    """A single error occurrence.

    Built by :meth:`errsnag.client.Client.new` and enriched with the chained
    ``with_*`` methods before being handed to
    :meth:`errsnag.client.Client.notify`::

        event = client.new(exc).with_user_id("42").with_meta_data("cart", "items", 3)
        client.notify(event)
    """

    exceptions: List[ExceptionRecord]
    release_stage: str = ""
    payload_version: str = PAYLOAD_VERSION
    user_id: str = ""
    app: Optional[App] = None
    device: Optional[Device] = None
    os_version: str = ""
    context: str = ""
    meta_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.exceptions:
            raise ValueError("an event needs at least one exception")

    def with_user_id(self, user_id: str) -> "Event":
        self.user_id = user_id
        return self

    def with_context(self, context: str) -> "Event":
        """Set the event context, usually the URL or route that failed."""
        self.context = context
        return self

    def with_meta_data_values(self, tab: str, values: Mapping[str, Any]) -> "Event":
        """Replace the whole ``tab`` with ``values``."""
        self.meta_data[tab] = dict(values)
        return self

    def with_meta_data(self, tab: str, name: str, value: Any) -> "Event":
        """Set ``name`` in ``tab``, keeping the tab's other keys."""
        self.meta_data.setdefault(tab, {})[name] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.user_id:
            data["userId"] = self.user_id
        data["payloadVersion"] = self.payload_version
        if self.app is not None:
            data["app"] = self.app.to_dict()
        if self.device is not None:
            data["device"] = self.device.to_dict()
        if self.os_version:
            data["osVersion"] = self.os_version
        data["releaseStage"] = self.release_stage
        if self.context:
            data["context"] = self.context
        data["exceptions"] = [exc.to_dict() for exc in self.exceptions]
        if self.meta_data:
            data["metaData"] = self.meta_data
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        app = data.get("app")
        device = data.get("device")
        return cls(
            exceptions=[ExceptionRecord.from_dict(e) for e in data["exceptions"]],
            release_stage=data.get("releaseStage", ""),
            payload_version=data.get("payloadVersion", PAYLOAD_VERSION),
            user_id=data.get("userId", ""),
            app=App.from_dict(app) if app is not None else None,
            device=Device.from_dict(device) if device is not None else None,
            os_version=data.get("osVersion", ""),
            context=data.get("context", ""),
            meta_data={tab: dict(values) for tab, values in data.get("metaData", {}).items()},
        )


@dataclass
class Payload:
    """Envelope for one POST to the collector."""

    api_key: str
    notifier: Notifier
    events: List[Event]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiKey": self.api_key,
            "notifier": self.notifier.to_dict(),
            "events": [event.to_dict() for event in self.events],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Payload":
        return cls(
            api_key=data["apiKey"],
            notifier=Notifier.from_dict(data["notifier"]),
            events=[Event.from_dict(e) for e in data["events"]],
        )
