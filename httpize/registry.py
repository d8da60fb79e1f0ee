"""Method registry: which provider methods are reachable and how their
arguments are built.

Registration happens in two phases. ``Methods.add`` records a method name with
its ordered ``(name, factory)`` argument pairs and checks each factory's
signature. ``Methods.bind`` then resolves every name on the provider instance
and checks the arity and the ``(stream, Settings, error)`` return annotation.
Both phases raise :class:`ConfigurationError`, so a bad declaration stops the
program at startup and nothing is re-checked per request.
"""

from __future__ import annotations

import inspect
import io
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple, get_args, get_origin, get_type_hints

from .args import Arg
from .errors import ConfigurationError
from .settings import MethodResult, Settings

MAX_ARGS = 10

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_UNION_TYPES = (typing.Union, types.UnionType)


class ApiProvider(ABC):
    """An object whose methods are exposed over HTTP."""

    @abstractmethod
    def httpize(self, methods: "Methods") -> None:
        """Declare the exposed methods with ``methods.add(...)``."""


@dataclass(frozen=True)
class ArgDef:
    name: str
    factory: Callable[[str], Arg]

    def create(self, raw: str) -> Any:
        return self.factory(raw)


@dataclass
class CallDef:
    arg_defs: Tuple[ArgDef, ...]
    method: Optional[Callable[..., Any]] = None

    @property
    def arg_names(self) -> Tuple[str, ...]:
        return tuple(arg_def.name for arg_def in self.arg_defs)


class Methods(Mapping):
    """Read-only mapping of method name to :class:`CallDef` once bound."""

    def __init__(self, max_args: int = MAX_ARGS) -> None:
        if max_args < 0:
            raise ValueError("max_args must be zero (unlimited) or positive")
        self._max_args = max_args
        self._defs: Dict[str, CallDef] = {}
        self._bound = False

    @classmethod
    def from_provider(cls, provider: Optional[object], max_args: int = MAX_ARGS) -> "Methods":
        """Collect the provider's declarations and bind them to it."""

        methods = cls(max_args=max_args)
        if provider is not None:
            declare = getattr(provider, "httpize", None)
            if not callable(declare):
                raise ConfigurationError(f"{type(provider).__name__} does not implement httpize(methods)")
            declare(methods)
        methods.bind(provider)
        return methods

    def __getitem__(self, method_name: str) -> CallDef:
        return self._defs[method_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._defs)

    def __len__(self) -> int:
        return len(self._defs)

    @property
    def bound(self) -> bool:
        return self._bound

    def add(self, method_name: str, arg_names: Sequence[str], arg_factories: Sequence[Callable[[str], Arg]]) -> None:
        if self._bound:
            raise ConfigurationError(f"Add method {method_name} fail, methods are already bound")
        if not method_name or "/" in method_name:
            raise ConfigurationError(f"Add method fail, invalid method name {method_name!r}")
        if method_name in self._defs:
            raise ConfigurationError(f"Add method {method_name} fail, method already registered")

        names = list(arg_names)
        factories = list(arg_factories)
        if len(names) != len(factories):
            raise ConfigurationError(
                f"Add method {method_name} fail, argNames and argFactories have different length"
            )
        if self._max_args and len(names) > self._max_args:
            raise ConfigurationError(
                f"Add method {method_name} fail, too many parameters (>{self._max_args})"
            )
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Add method {method_name} fail, duplicate parameter names")

        arg_defs = []
        for name, factory in zip(names, factories):
            _check_factory(method_name, name, factory)
            arg_defs.append(ArgDef(name=name, factory=factory))
        self._defs[method_name] = CallDef(arg_defs=tuple(arg_defs))

    def bind(self, provider: Optional[object]) -> None:
        if self._bound:
            raise ConfigurationError("methods are already bound")
        for method_name, call_def in self._defs.items():
            method = getattr(provider, method_name, None)
            if method is None or not callable(method):
                raise ConfigurationError(f"Method {method_name} not found on {type(provider).__name__}")
            try:
                signature = inspect.signature(method)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Method {method_name} has no inspectable signature") from exc
            if not _accepts(signature, len(call_def.arg_defs)):
                raise ConfigurationError(
                    f"Method {method_name} does not accept {len(call_def.arg_defs)} positional argument(s)"
                )
            _check_result_hint(method_name, method)
            call_def.method = method
        self._bound = True


def _accepts(signature: inspect.Signature, count: int) -> bool:
    params = list(signature.parameters.values())
    positional = [p for p in params if p.kind in _POSITIONAL]
    required = [p for p in positional if p.default is p.empty]
    if any(p.kind is p.KEYWORD_ONLY and p.default is p.empty for p in params):
        return False
    has_var_args = any(p.kind is p.VAR_POSITIONAL for p in params)
    return len(required) <= count and (count <= len(positional) or has_var_args)


def _type_hints(obj: Any, what: str) -> Dict[str, Any]:
    try:
        return get_type_hints(obj)
    except (TypeError, AttributeError):
        # partials and other callables without annotations
        return {}
    except NameError as exc:
        raise ConfigurationError(f"{what} has unresolvable annotations: {exc}") from exc


def _union_members(tp: Any) -> Tuple[Any, ...]:
    if get_origin(tp) in _UNION_TYPES:
        return tuple(arg for arg in get_args(tp) if arg is not type(None))
    return (tp,)


def _all_subclass(tp: Any, bases: Tuple[type, ...]) -> bool:
    for member in _union_members(tp):
        base = get_origin(member) or member
        if not (isinstance(base, type) and issubclass(base, bases)):
            return False
    return True


def _check_factory(method_name: str, arg_name: str, factory: Any) -> None:
    what = f"argument factory for {method_name}.{arg_name}"
    if not callable(factory):
        raise ConfigurationError(f"{what} is not callable")
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{what} has no inspectable signature") from exc
    if not _accepts(signature, 1):
        raise ConfigurationError(f"{what} must take exactly one string")

    if isinstance(factory, type):
        if not issubclass(factory, Arg):
            raise ConfigurationError(f"{what} does not produce an Arg")
        hints = _type_hints(factory.__init__, what)
    else:
        hints = _type_hints(factory, what)
        produced = hints.get("return")
        if isinstance(produced, type) and not issubclass(produced, Arg):
            raise ConfigurationError(f"{what} does not produce an Arg")

    first = next(
        (p for p in signature.parameters.values() if p.kind in _POSITIONAL or p.kind is p.VAR_POSITIONAL),
        None,
    )
    accepted = hints.get(first.name) if first is not None else None
    if accepted is not None and accepted is not Any and not _all_subclass(accepted, (str,)):
        raise ConfigurationError(f"{what} must accept a str, not {accepted!r}")


def _check_result_hint(method_name: str, method: Callable[..., Any]) -> None:
    hints = _type_hints(method, f"Method {method_name}")
    result = hints.get("return")
    if isinstance(result, type) and issubclass(result, MethodResult):
        return
    if get_origin(result) is tuple:
        parts = get_args(result)
        if (
            len(parts) == 3
            and _all_subclass(parts[0], (io.IOBase, typing.IO))
            and _all_subclass(parts[1], (Settings,))
            and _all_subclass(parts[2], (BaseException,))
        ):
            return
    raise ConfigurationError(f"Method {method_name} does not return (stream, Settings, error)")


__all__ = [
    "ApiProvider",
    "ArgDef",
    "CallDef",
    "MAX_ARGS",
    "Methods",
]
