"""Threaded HTTP/1.1 server implemented directly over sockets."""

from __future__ import annotations

import logging
import socket
import threading
from contextlib import suppress
from http import HTTPStatus
from typing import Protocol, Tuple

from .http import HttpRequest, HttpResponse
from .responses import internal_error, text_error

logger = logging.getLogger("httpize.server")

MAX_HEADER_BYTES = 16 * 1024
MAX_BODY_BYTES = 5 * 1024 * 1024
CONNECTION_TIMEOUT = 30


class RequestHandler(Protocol):
    def handle(self, request: HttpRequest) -> HttpResponse:
        """Process ``request`` and return an HTTP response."""


def run_server(handler: RequestHandler, port: int, host: str = "0.0.0.0") -> None:
    """Start a blocking TCP server that delegates to ``handler``."""

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(128)
        logger.info("listening on %s:%s", host, sock.getsockname()[1])
        try:
            while True:
                conn, addr = sock.accept()
                thread = threading.Thread(target=serve_connection, args=(conn, addr, handler), daemon=True)
                thread.start()
        except KeyboardInterrupt:
            logger.info("shutting down")


def serve_connection(conn: socket.socket, addr: Tuple[str, int], handler: RequestHandler) -> None:
    with conn:
        conn.settimeout(CONNECTION_TIMEOUT)
        try:
            request = read_request(conn, addr)
            if request is None:
                return
        except (ValueError, UnicodeDecodeError) as exc:
            logger.warning("malformed request from %s: %s", addr[0], exc)
            _send_response(conn, text_error(HTTPStatus.BAD_REQUEST, "Bad Request"))
            return
        except OSError as exc:
            logger.warning("reading request from %s failed: %s", addr[0], exc)
            return

        try:
            response = handler.handle(request)
        except Exception:  # noqa: BLE001
            logger.exception("unhandled error serving %s %s", request.method, request.target)
            response = internal_error()

        try:
            _send_response(conn, response)
        except OSError as exc:
            logger.warning("writing response to %s failed: %s", addr[0], exc)


def read_request(conn: socket.socket, addr: Tuple[str, int]) -> HttpRequest | None:
    buffer = bytearray()
    while b"\r\n\r\n" not in buffer:
        chunk = conn.recv(4096)
        if not chunk:
            return None
        buffer.extend(chunk)
        if len(buffer) > MAX_HEADER_BYTES:
            raise ValueError("header section too large")

    header_part, body_part = buffer.split(b"\r\n\r\n", 1)
    lines = header_part.split(b"\r\n")
    request_line = lines[0].decode("utf-8").strip()
    parts = request_line.split()
    if len(parts) != 3:
        raise ValueError("invalid request line")
    method, target, version = parts
    if version not in {"HTTP/1.1", "HTTP/1.0"}:
        raise ValueError("unsupported HTTP version")

    headers: dict[str, str] = {}
    for raw in lines[1:]:
        if not raw:
            continue
        if b":" not in raw:
            raise ValueError("invalid header")
        name, value = raw.split(b":", 1)
        headers[name.decode("ascii", "ignore").strip().lower()] = value.decode("iso-8859-1").strip()

    content_length = 0
    if "content-length" in headers:
        with suppress(ValueError):
            content_length = int(headers["content-length"]) if headers["content-length"] else 0
    content_length = max(0, min(content_length, MAX_BODY_BYTES))

    body = bytearray(body_part[:content_length])
    while len(body) < content_length:
        chunk = conn.recv(min(65536, content_length - len(body)))
        if not chunk:
            break
        body.extend(chunk)

    return HttpRequest.from_target(method, target, headers=headers, body=bytes(body), client=addr)


def _send_response(conn: socket.socket, response: HttpResponse) -> None:
    response.headers.setdefault("Connection", "close")
    response.ensure_content_length()
    try:
        reason = HTTPStatus(response.status).phrase
    except ValueError:
        reason = "Unknown"
    status_line = f"HTTP/1.1 {int(response.status)} {reason}\r\n"
    header_lines = "".join(f"{name}: {value}\r\n" for name, value in response.headers.items())
    conn.sendall(status_line.encode("iso-8859-1"))
    conn.sendall(header_lines.encode("iso-8859-1"))
    conn.sendall(b"\r\n")
    if response.body:
        conn.sendall(response.body)


__all__ = [
    "RequestHandler",
    "read_request",
    "run_server",
    "serve_connection",
]
