"""Shared fixtures for errsnag tests."""

from __future__ import annotations

import json
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from errsnag.client import Client


class Collector:
    """Local stand-in for the error-tracking endpoint."""

    def __init__(self) -> None:
        self.requests = []
        self.status = 200
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler())
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def endpoint(self) -> str:
        host, port = self._server.server_address[:2]
        return f"{host}:{port}"

    def _handler(self):
        collector = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", 0))
                body = self.rfile.read(length)
                collector.requests.append(
                    {
                        "path": self.path,
                        "content_type": self.headers.get("Content-Type"),
                        "body": body,
                        "json": json.loads(body),
                    }
                )
                self.send_response(collector.status)
                self.send_header("Content-Length", "2")
                self.end_headers()
                self.wfile.write(b"OK")

            def log_message(self, format, *args):
                pass

        return Handler

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    for name in ("http_proxy", "https_proxy", "all_proxy", "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def collector():
    collector = Collector()
    collector.start()
    yield collector
    collector.stop()


@pytest.fixture
def client(collector):
    return Client(
        api_key="K",
        endpoint=collector.endpoint,
        use_ssl=False,
        hostname="test-host",
        os_version="3.2.1",
    )


@pytest.fixture
def offline_client():
    """Client pointed at an endpoint that must never be contacted."""
    return Client(
        api_key="K",
        endpoint="collector.invalid",
        use_ssl=False,
        hostname="test-host",
    )


class FakeRequest:
    """Minimal inbound request exposing what request_info reads."""

    def __init__(self, url="http://example.com/orders/7?x=1", method="GET", headers=None):
        self.url = url
        self.method = method
        self.headers = headers if headers is not None else {"User-Agent": "pytest"}
        self.remote_addr = "10.0.0.1"


@pytest.fixture
def fake_request():
    return FakeRequest()


def _read_request(conn: socket.socket) -> None:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(65536)
        if not chunk:
            return
        data += chunk
    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b":")
        if name.strip().lower() == b"content-length":
            length = int(value)
    while len(body) < length:
        chunk = conn.recv(65536)
        if not chunk:
            return
        body += chunk


@pytest.fixture
def garbage_endpoint():
    """Endpoint that answers any request with a malformed status line."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)

    def serve():
        conn, _ = server.accept()
        with conn:
            _read_request(conn)
            conn.sendall(b"garbage\r\n\r\n")

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    host, port = server.getsockname()
    yield f"{host}:{port}"
    thread.join(timeout=5)
    server.close()
