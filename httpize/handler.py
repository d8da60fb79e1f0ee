from __future__ import annotations

import gzip
import io
import logging
import re
import shutil
from email.utils import formatdate
from http import HTTPStatus
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

from .args import Arg
from .clock import Clock, RealClock
from .errors import (
    ApplicationError,
    BadArgumentError,
    DuplicateParameterError,
    MalformedQueryError,
    MissingParameterError,
    NilStreamError,
    RequestError,
    ResultShapeError,
    StreamCopyError,
    UnexpectedParameterError,
    UnknownMethodError,
    UnsupportedMethodError,
)
from .http import HttpRequest, HttpResponse
from .registry import MAX_ARGS, CallDef, Methods
from .responses import error_response, internal_error
from .settings import Settings

logger = logging.getLogger("httpize.handler")

SUPPORTED_METHODS = frozenset({"GET", "POST"})

QueryParams = Dict[str, List[str]]

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class Handler:
    """Dispatches HTTP requests to the methods a provider declares.

    The registry is built and bound once here; ``handle`` only reads it, so one
    handler can serve any number of concurrent requests.
    """

    def __init__(
        self,
        provider: Optional[object],
        default_settings: Optional[Settings] = None,
        *,
        max_args: int = MAX_ARGS,
        clock: Optional[Clock] = None,
    ) -> None:
        self._provider = provider
        self._methods = Methods.from_provider(provider, max_args=max_args)
        self._default_settings = default_settings if default_settings is not None else Settings.default()
        self._clock = clock or RealClock()

    @property
    def methods(self) -> Methods:
        return self._methods

    @property
    def default_settings(self) -> Settings:
        return self._default_settings

    def handle(self, request: HttpRequest) -> HttpResponse:
        try:
            response = self._dispatch(request)
        except ApplicationError as err:
            logger.debug("application error %s for %s", err, request.target)
            response = error_response(err)
        except RequestError as exc:
            logger.warning("%s (URL: %s)", exc, request.target)
            response = internal_error()
        response.ensure_content_length()
        return response

    def _dispatch(self, request: HttpRequest) -> HttpResponse:
        if request.method not in SUPPORTED_METHODS:
            raise UnsupportedMethodError(f"Unsupported HTTP method: {request.method}")

        method_name = request.path.rsplit("/", 1)[-1]
        call_def = self._methods.get(method_name)
        if call_def is None:
            raise UnknownMethodError(f"Method {method_name} not defined")

        params = _parse_query(method_name, request.query)
        args = _build_args(method_name, call_def, params)
        _check_param_counts(method_name, call_def, params)

        try:
            result = call_def.method(*args)
        except (ApplicationError, RequestError):
            raise
        except Exception:  # noqa: BLE001
            logger.exception("Method %s failed (URL: %s)", method_name, request.target)
            return internal_error()

        try:
            body, settings, error = result
        except (TypeError, ValueError) as exc:
            raise ResultShapeError(f"Method {method_name} did not return (stream, settings, error)") from exc

        if error is not None:
            _close_body(method_name, body)
            if not isinstance(error, ApplicationError):
                logger.warning("Method %s returned error %r (URL: %s)", method_name, error, request.target)
            return error_response(error)

        if settings is None:
            settings = self._default_settings
        elif not isinstance(settings, Settings):
            _close_body(method_name, body)
            raise ResultShapeError(f"Method {method_name} returned {type(settings).__name__} instead of Settings")

        if body is None:
            raise NilStreamError(f"Method {method_name} returned nil reader and error")

        compress = settings.gzip and "gzip" in request.header("Accept-Encoding")
        headers = self._settings_headers(request, settings)
        if compress:
            headers["Content-Encoding"] = "gzip"
        payload = _copy_body(method_name, body, compress)
        return HttpResponse(int(HTTPStatus.OK), headers, payload)

    def _settings_headers(self, request: HttpRequest, settings: Settings) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if settings.content_type:
            headers["Content-Type"] = settings.content_type
        if settings.cache > 0 and request.method == "GET":
            headers["Expires"] = formatdate(int(self._clock.now()) + settings.cache, usegmt=True)
        return headers


def _parse_query(method_name: str, query: str) -> QueryParams:
    if not query:
        return {}
    if ";" in query:
        raise MalformedQueryError(f"Malformed query for {method_name}: semicolon separator")
    if _BAD_ESCAPE.search(query):
        raise MalformedQueryError(f"Malformed query for {method_name}: invalid percent-escape")
    try:
        return parse_qs(query, keep_blank_values=True, errors="strict")
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedQueryError(f"Malformed query for {method_name}: {exc}") from exc


def _build_args(method_name: str, call_def: CallDef, params: QueryParams) -> List[Any]:
    args: List[Any] = []
    for arg_def in call_def.arg_defs:
        values = params.get(arg_def.name)
        if not values:
            continue
        try:
            arg = arg_def.create(values[0])
        except ApplicationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise BadArgumentError(f"Bad parameter {arg_def.name} in Method {method_name}: {exc!r}") from exc
        if not isinstance(arg, Arg):
            raise BadArgumentError(f"Bad parameter {arg_def.name} in Method {method_name}")
        try:
            arg.check()
        except ApplicationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise BadArgumentError(f"Check of {arg_def.name} in Method {method_name} failed: {exc!r}") from exc
        args.append(arg)
    return args


def _check_param_counts(method_name: str, call_def: CallDef, params: QueryParams) -> None:
    declared = call_def.arg_names
    found = sum(1 for name in declared if name in params)
    supplied = sum(len(values) for values in params.values())
    if found == len(declared) and found == supplied:
        return

    missing = [name for name in declared if name not in params]
    if missing:
        raise MissingParameterError(f"{method_name} called incorrectly, missing {', '.join(missing)}")
    repeated = sorted(name for name in declared if len(params[name]) > 1)
    if repeated:
        raise DuplicateParameterError(f"{method_name} called incorrectly, repeated {', '.join(repeated)}")
    unexpected = sorted(set(params) - set(declared))
    raise UnexpectedParameterError(f"{method_name} called incorrectly, unexpected {', '.join(unexpected)}")


def _copy_body(method_name: str, body: Any, compress: bool) -> bytes:
    buffer = io.BytesIO()
    try:
        if compress:
            with gzip.GzipFile(fileobj=buffer, mode="wb") as gz:
                shutil.copyfileobj(body, gz)
        else:
            shutil.copyfileobj(body, buffer)
    except Exception as exc:  # noqa: BLE001
        raise StreamCopyError(f"Copying response of {method_name} failed: {exc!r}") from exc
    finally:
        _close_body(method_name, body)
    return buffer.getvalue()


def _close_body(method_name: str, body: Any) -> None:
    close = getattr(body, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Closing response of %s failed: %r", method_name, exc)


__all__ = ["Handler", "SUPPORTED_METHODS"]
