"""Tests for payload encoding."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from errsnag.client import DEFAULT_NOTIFIER
from errsnag.encoding import decode_payload, encode, encode_payload
from errsnag.errors import SerializationError
from errsnag.event import App, Device, Event, ExceptionRecord, Payload, StackFrame


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    def __repr__(self):
        return "<Opaque handle>"


def _payload(meta_data=None) -> Payload:
    event = Event(
        exceptions=[
            ExceptionRecord(
                error_class="ValueError",
                message="boom",
                stacktrace=[StackFrame(file="/app/main.py", line_number=10, method="main", in_project=True)],
            )
        ],
        release_stage="production",
        user_id="12345",
        app=App(version="1.0.0", release_stage="production"),
        device=Device(os_version="3.2.1", hostname="web-1"),
        os_version="3.2.1",
        context="/checkout",
        meta_data=meta_data or {},
    )
    return Payload(api_key="K", notifier=DEFAULT_NOTIFIER, events=[event])


def test_compact_by_default():
    body = encode_payload(_payload())
    assert b"\n" not in body
    assert json.loads(body)["apiKey"] == "K"


def test_indent_uses_tabs():
    body = encode_payload(_payload(), indent=True).decode("utf-8")
    assert "\n\t\"apiKey\": \"K\"" in body


def test_round_trip_preserves_structure():
    payload = _payload({"user_info": {"account_id": 5555, "user_agent": "ie4", "ratio": 0.5, "ok": True}})
    assert decode_payload(encode_payload(payload)) == payload


def test_round_trip_keeps_metadata_keys_and_scalars():
    payload = _payload({"extra": {"when": datetime(2024, 1, 2, tzinfo=timezone.utc), "n": 3, "s": "x"}})
    decoded = decode_payload(encode_payload(payload))
    extra = decoded.events[0].meta_data["extra"]
    assert set(extra) == {"when", "n", "s"}
    assert extra["n"] == 3
    assert extra["s"] == "x"


def test_opaque_values_degrade_instead_of_failing():
    data = json.loads(
        encode(
            {
                "point": Point(1, 2),
                "tags": ("a", "b"),
                "raw": b"\xffbytes",
                "when": datetime(2024, 1, 2, 3, 4, 5),
                "handle": Opaque(),
                "nested": {"deeper": [Opaque()]},
            }
        )
    )
    assert data["point"] == {"x": 1, "y": 2}
    assert data["tags"] == ["a", "b"]
    assert data["raw"].endswith("bytes")
    assert data["when"] == "2024-01-02T03:04:05"
    assert data["handle"] == "<Opaque handle>"
    assert data["nested"] == {"deeper": ["<Opaque handle>"]}


def test_sets_become_lists():
    assert json.loads(encode({"s": {1}})) == {"s": [1]}


def test_non_finite_float_is_a_serialization_error():
    with pytest.raises(SerializationError):
        encode_payload(_payload({"stats": {"ratio": float("nan")}}))


def test_unsupported_key_is_a_serialization_error():
    with pytest.raises(SerializationError):
        encode({("a", "b"): 1})


def test_cycle_is_a_serialization_error():
    cyclic = {}
    cyclic["self"] = cyclic
    with pytest.raises(SerializationError):
        encode(cyclic)
