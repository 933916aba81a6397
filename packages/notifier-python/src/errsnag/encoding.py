from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any, Union

from errsnag.errors import SerializationError
from errsnag.event import Payload


def _default(value: Any) -> Any:
    """Best-effort JSON form of metadata values json cannot encode natively."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return repr(value)


def encode(document: Any, indent: bool = False) -> bytes:
    try:
        text = json.dumps(
            document,
            default=_default,
            allow_nan=False,
            indent="\t" if indent else None,
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Failed to encode payload: {e}") from e
    return text.encode("utf-8")


def encode_payload(payload: Union[Payload, Any], indent: bool = False) -> bytes:
    """Encode ``payload`` as the JSON request body."""
    if isinstance(payload, Payload):
        payload = payload.to_dict()
    return encode(payload, indent=indent)


def decode_payload(body: Union[bytes, str]) -> Payload:
    return Payload.from_dict(json.loads(body))
