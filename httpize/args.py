from __future__ import annotations

import re
from abc import ABC, abstractmethod
from http import HTTPStatus

from .errors import ApplicationError


class Arg(ABC):
    """A method argument built from one query-string value."""

    @abstractmethod
    def check(self) -> None:
        """Raise :class:`ApplicationError` if the value is not acceptable."""


_SAFE_PATTERN = re.compile(r"^[A-Za-z0-9 ,.@_-]*$")


class SafeString(Arg):
    """Text limited to letters, digits, spaces and ``,.@_-``."""

    def __init__(self, value: str) -> None:
        self.value = value

    def check(self) -> None:
        if not _SAFE_PATTERN.match(self.value):
            raise ApplicationError(HTTPStatus.BAD_REQUEST, HTTPStatus.BAD_REQUEST.phrase)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"SafeString({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeString):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)


__all__ = ["Arg", "SafeString"]
