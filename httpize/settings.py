from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, NamedTuple, Optional


@dataclass(frozen=True)
class Settings:
    """Per-response options returned by a provider method.

    - ``content_type``: value of the ``Content-Type`` header, empty to leave it unset
    - ``cache``: seconds until ``Expires``; ``0`` sends no caching header
    - ``gzip``: compress the body when the client accepts gzip
    """

    content_type: str = ""
    cache: int = 0
    gzip: bool = False

    @classmethod
    def default(cls) -> "Settings":
        """``text/html``, no caching, no compression."""

        return cls(content_type="text/html")


class MethodResult(NamedTuple):
    """What every provider method returns: body stream, settings and error."""

    body: Optional[BinaryIO]
    settings: Optional[Settings] = None
    error: Optional[Exception] = None


__all__ = ["MethodResult", "Settings"]
