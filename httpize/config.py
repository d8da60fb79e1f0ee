from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass

from .registry import MAX_ARGS
from .settings import Settings

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _load_dotenv_if_present() -> None:
    # Optional, no dependency: load simple KEY=VALUE lines
    env_path = pathlib.Path(__file__).parent / ".env"
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip())


_load_dotenv_if_present()


@dataclass
class HttpizeConfig:
    host: str
    port: int
    max_args: int
    log_level: str
    content_type: str
    cache: int
    gzip: bool

    def default_settings(self) -> Settings:
        """Settings used when a method returns none of its own."""

        return Settings(content_type=self.content_type, cache=self.cache, gzip=self.gzip)


def load_config() -> HttpizeConfig:
    host = os.environ.get("HTTPIZE_HOST", "0.0.0.0")
    port = _coerce_port(os.environ.get("HTTPIZE_PORT", "8080"))
    max_args = int(os.environ.get("HTTPIZE_MAX_ARGS", str(MAX_ARGS)))
    if max_args < 0:
        raise ValueError(f"HTTPIZE_MAX_ARGS must be >= 0, got {max_args}")
    log_level = os.environ.get("HTTPIZE_LOG_LEVEL", "INFO").upper()
    content_type = os.environ.get("HTTPIZE_CONTENT_TYPE", "text/html")
    cache = int(os.environ.get("HTTPIZE_CACHE", "0"))
    gzip = _coerce_bool("HTTPIZE_GZIP", os.environ.get("HTTPIZE_GZIP", "false"))
    return HttpizeConfig(
        host=host,
        port=port,
        max_args=max_args,
        log_level=log_level,
        content_type=content_type,
        cache=cache,
        gzip=gzip,
    )


def _coerce_port(raw: str) -> int:
    value = int(raw)
    if value < 0 or value > 65535:
        raise ValueError(f"Invalid port number: {value}")
    return value


def _coerce_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


__all__ = ["HttpizeConfig", "load_config"]
