from __future__ import annotations

from typing import Optional


class HttpizeError(Exception):
    """Base class for every error raised by httpize."""


class ConfigurationError(HttpizeError):
    """Malformed method registration or provider binding. Fatal at startup."""


class ApplicationError(HttpizeError):
    """An error the application wants the client to see.

    ``code`` becomes the HTTP status and ``message`` the response body. For
    redirect codes (301, 302, 303) ``location`` is sent as the ``Location``
    header.
    """

    def __init__(self, code: int, message: str, location: Optional[str] = None) -> None:
        super().__init__(f"{code} {message}")
        self.code = int(code)
        self.message = message
        self.location = location


class RequestError(HttpizeError):
    """A request that cannot be dispatched. Always answered with an opaque 500."""


class UnsupportedMethodError(RequestError):
    pass


class UnknownMethodError(RequestError):
    pass


class MalformedQueryError(RequestError):
    pass


class MissingParameterError(RequestError):
    pass


class DuplicateParameterError(RequestError):
    pass


class UnexpectedParameterError(RequestError):
    pass


class BadArgumentError(RequestError):
    """An argument factory failed or produced something that is not an ``Arg``."""


class ResultShapeError(RequestError):
    """A method returned something other than ``(stream, settings, error)``."""


class NilStreamError(RequestError):
    """A method returned neither a body stream nor an error."""


class StreamCopyError(RequestError):
    pass


__all__ = [
    "ApplicationError",
    "BadArgumentError",
    "ConfigurationError",
    "DuplicateParameterError",
    "HttpizeError",
    "MalformedQueryError",
    "MissingParameterError",
    "NilStreamError",
    "RequestError",
    "ResultShapeError",
    "StreamCopyError",
    "UnexpectedParameterError",
    "UnknownMethodError",
    "UnsupportedMethodError",
]
