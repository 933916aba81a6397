from __future__ import annotations

import os
import sys
import sysconfig
import traceback
from types import TracebackType
from typing import Callable, Iterable, List, Optional

from errsnag.event import StackFrame

TraceFilter = Callable[[List[StackFrame]], List[StackFrame]]

# Frames of the error-reporting machinery itself, never user code.
PANIC_METHOD = "panic"

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_INSTALL_DIRS = ("site-packages", "dist-packages")


def _library_roots() -> tuple:
    roots = set()
    paths = sysconfig.get_paths()
    for key in ("stdlib", "platstdlib"):
        path = paths.get(key)
        if path:
            roots.add(os.path.normcase(os.path.abspath(path)))
            roots.add(os.path.normcase(os.path.realpath(path)))
    return tuple(sorted(roots))


_LIBRARY_ROOTS = _library_roots()


def is_in_project(path: str) -> bool:
    """Whether ``path`` belongs to the application rather than Python or an installed package."""
    if not path or path.startswith("<"):
        return False
    parts = path.replace("\\", "/").split("/")
    if any(part in _INSTALL_DIRS for part in parts):
        return False
    normalized = os.path.normcase(os.path.abspath(path))
    return not any(
        normalized == root or normalized.startswith(root + os.sep) for root in _LIBRARY_ROOTS
    )


def _is_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


def _method_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _frames(summaries: Iterable[traceback.FrameSummary]) -> List[StackFrame]:
    frames = []
    for summary in summaries:
        method = _method_name(summary.name)
        if method == PANIC_METHOD or _is_internal(summary.filename):
            continue
        frames.append(
            StackFrame(
                file=summary.filename,
                line_number=summary.lineno or 0,
                method=method,
                in_project=is_in_project(summary.filename),
            )
        )
    return frames


def from_traceback(tb: TracebackType) -> List[StackFrame]:
    """Frames an exception unwound through, then the callers above them.

    Innermost call first. The traceback ends where the exception was
    caught, so the walk continues outward from there through the live
    stack until no caller is left.
    """
    unwound = list(traceback.walk_tb(tb))
    seen = {frame for frame, _ in unwound}
    walk = list(reversed(unwound))
    caller = tb.tb_frame.f_back
    if caller is not None:
        walk.extend((f, lineno) for f, lineno in traceback.walk_stack(caller) if f not in seen)
    return _frames(traceback.StackSummary.extract(walk, lookup_lines=False))


def from_stack(skip: int = 0) -> List[StackFrame]:
    """Frames of the current call stack, innermost call first.

    ``skip`` frames above the caller are dropped before walking outward.
    """
    frame = sys._getframe(skip + 1)
    return _frames(reversed(traceback.extract_stack(frame)))


def capture(
    error: Optional[BaseException] = None,
    trace_filter: Optional[TraceFilter] = None,
    skip: int = 0,
) -> List[StackFrame]:
    """Build the stack trace for ``error``.

    Uses the exception's own traceback when it has one (it was raised),
    otherwise the live call stack. ``trace_filter`` receives the full list
    and its result is used as-is.
    """
    tb = error.__traceback__ if error is not None else None
    if tb is not None:
        frames = from_traceback(tb)
    else:
        frames = from_stack(skip + 1)
    if trace_filter is not None:
        frames = trace_filter(frames)
    return frames
