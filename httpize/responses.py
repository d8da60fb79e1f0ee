from __future__ import annotations

from http import HTTPStatus
from typing import Dict, Optional

from .errors import ApplicationError
from .http import HttpResponse

REDIRECT_CODES = frozenset({HTTPStatus.MOVED_PERMANENTLY, HTTPStatus.FOUND, HTTPStatus.SEE_OTHER})


def text_error(status: HTTPStatus | int, message: str, *, extra_headers: Optional[Dict[str, str]] = None) -> HttpResponse:
    body = (message + "\n").encode()
    headers = {
        "Content-Type": "text/plain; charset=utf-8",
        "X-Content-Type-Options": "nosniff",
        "Content-Length": str(len(body)),
    }
    if extra_headers:
        headers.update(extra_headers)
    return HttpResponse(int(status), headers, body)


def internal_error() -> HttpResponse:
    """Opaque 500; the cause is only ever logged."""

    return text_error(HTTPStatus.INTERNAL_SERVER_ERROR, "error")


def error_response(err: BaseException) -> HttpResponse:
    """Turn an error from an argument check or a method into a response.

    Application errors keep their status and message, plus ``Location`` for
    redirects. Everything else becomes :func:`internal_error`.
    """

    if not isinstance(err, ApplicationError):
        return internal_error()
    extra_headers = None
    if err.code in REDIRECT_CODES and err.location is not None:
        extra_headers = {"Location": err.location}
    return text_error(err.code, err.message, extra_headers=extra_headers)


__all__ = [
    "REDIRECT_CODES",
    "error_response",
    "internal_error",
    "text_error",
]
