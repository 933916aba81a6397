from __future__ import annotations

from typing import Any, Dict


def request_url(request: Any) -> str:
    """URL of an inbound request from Django, Flask/Werkzeug or urllib."""
    build_absolute_uri = getattr(request, "build_absolute_uri", None)
    if callable(build_absolute_uri):
        return str(build_absolute_uri())
    for attr in ("url", "full_url"):
        value = getattr(request, attr, None)
        if value:
            return str(value)
    return str(request)


def _headers(request: Any) -> Dict[str, str]:
    headers = getattr(request, "headers", None)
    if headers is None:
        return {}
    items = headers.items() if hasattr(headers, "items") else headers
    return {str(k): str(v) for k, v in items}


def request_dump(request: Any) -> Dict[str, Any]:
    """Structural dump of a request, used as ``request.dump`` metadata."""
    dump: Dict[str, Any] = {"url": request_url(request)}
    method = getattr(request, "method", None)
    if method is None and callable(getattr(request, "get_method", None)):
        method = request.get_method()
    if method:
        dump["method"] = str(method)
    headers = _headers(request)
    if headers:
        dump["headers"] = headers
    remote_addr = getattr(request, "remote_addr", None)
    if remote_addr is None:
        meta = getattr(request, "META", None)
        if isinstance(meta, dict):
            remote_addr = meta.get("REMOTE_ADDR")
    if remote_addr:
        dump["remoteAddr"] = str(remote_addr)
    return dump
