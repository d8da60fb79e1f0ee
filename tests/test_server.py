from __future__ import annotations

import socket

import pytest

from httpize.demo import DemoApi
from httpize.handler import Handler
from httpize.http import HttpRequest, HttpResponse
from httpize.server import serve_connection


def _exchange(raw_request: bytes, handler) -> bytes:
    server_side, client_side = socket.socketpair()
    with client_side:
        client_side.sendall(raw_request)
        client_side.shutdown(socket.SHUT_WR)
        serve_connection(server_side, ("127.0.0.1", 0), handler)
        chunks = []
        while True:
            chunk = client_side.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def _split(raw: bytes) -> tuple[str, dict[str, str], bytes]:
    head, body = raw.split(b"\r\n\r\n", 1)
    lines = head.decode("iso-8859-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, value = line.split(":", 1)
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


@pytest.fixture
def handler() -> Handler:
    return Handler(DemoApi())


def test_get_round_trip(handler: Handler) -> None:
    raw = _exchange(b"GET /Echo?name=Gopher HTTP/1.1\r\nHost: x\r\n\r\n", handler)

    status_line, headers, body = _split(raw)
    assert status_line == "HTTP/1.1 200 OK"
    assert headers["Content-Type"] == "text/html"
    assert headers["Content-Length"] == "11"
    assert headers["Connection"] == "close"
    assert body == b"Echo Gopher"


def test_redirect_round_trip(handler: Handler) -> None:
    raw = _exchange(b"GET /ThreeOhThree HTTP/1.1\r\n\r\n", handler)

    status_line, headers, _ = _split(raw)
    assert status_line == "HTTP/1.1 303 See Other"
    assert headers["Location"] == "http://lookhere"


def test_headers_are_case_insensitive(handler: Handler) -> None:
    seen: list[HttpRequest] = []

    class Spy:
        def handle(self, request: HttpRequest) -> HttpResponse:
            seen.append(request)
            return handler.handle(request)

    _exchange(b"POST /Greeting HTTP/1.1\r\nACCEPT-ENCODING: gzip\r\nContent-Length: 3\r\n\r\nabc", Spy())

    assert seen[0].header("Accept-Encoding") == "gzip"
    assert seen[0].body == b"abc"
    assert seen[0].path == "/Greeting"


def test_malformed_request_line(handler: Handler) -> None:
    raw = _exchange(b"NONSENSE\r\n\r\n", handler)

    status_line, _, _ = _split(raw)
    assert status_line == "HTTP/1.1 400 Bad Request"


def test_handler_crash_becomes_500() -> None:
    class Exploding:
        def handle(self, request: HttpRequest) -> HttpResponse:
            raise RuntimeError("boom")

    raw = _exchange(b"GET /Greeting HTTP/1.1\r\n\r\n", Exploding())

    status_line, _, body = _split(raw)
    assert status_line == "HTTP/1.1 500 Internal Server Error"
    assert body == b"error\n"


def test_utf8_target_reaches_handler_intact(handler: Handler) -> None:
    seen: list[HttpRequest] = []

    class Spy:
        def handle(self, request: HttpRequest) -> HttpResponse:
            seen.append(request)
            return handler.handle(request)

    _exchange("GET /Echo?name=café HTTP/1.1\r\n\r\n".encode("utf-8"), Spy())

    assert seen[0].query == "name=café"


def test_invalid_utf8_target_is_bad_request(handler: Handler) -> None:
    raw = _exchange(b"GET /Echo?name=caf\xe9 HTTP/1.1\r\n\r\n", handler)

    status_line, _, _ = _split(raw)
    assert status_line == "HTTP/1.1 400 Bad Request"
