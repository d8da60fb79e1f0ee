"""HTTP request/response values exchanged between the server and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit


@dataclass(slots=True)
class HttpRequest:
    """Represents an HTTP/1.1 request received by the server."""

    method: str
    target: str
    path: str
    query: str
    headers: Dict[str, str]
    body: bytes = b""
    client: Optional[Tuple[str, int]] = None

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
        client: Optional[Tuple[str, int]] = None,
    ) -> "HttpRequest":
        """Build a request from a raw request-target such as ``/Echo?name=x``."""

        parsed = urlsplit(target)
        return cls(
            method=method.upper(),
            target=target,
            path=parsed.path or "/",
            query=parsed.query,
            headers={name.lower(): value for name, value in (headers or {}).items()},
            body=body,
            client=client,
        )

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""

        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


@dataclass(slots=True)
class HttpResponse:
    """Represents an HTTP/1.1 response produced by the dispatcher."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def ensure_content_length(self) -> None:
        """Guarantee the ``Content-Length`` header is present."""

        if "Content-Length" not in self.headers:
            self.headers["Content-Length"] = str(len(self.body))


__all__ = [
    "HttpRequest",
    "HttpResponse",
]
