"""Expose the methods of a provider object as HTTP endpoints."""

from .args import Arg, SafeString
from .errors import ApplicationError, ConfigurationError, HttpizeError, RequestError
from .handler import Handler
from .http import HttpRequest, HttpResponse
from .registry import MAX_ARGS, ApiProvider, Methods
from .settings import MethodResult, Settings

__all__ = [
    "ApiProvider",
    "ApplicationError",
    "Arg",
    "ConfigurationError",
    "Handler",
    "HttpRequest",
    "HttpResponse",
    "HttpizeError",
    "MAX_ARGS",
    "MethodResult",
    "Methods",
    "RequestError",
    "SafeString",
    "Settings",
]
