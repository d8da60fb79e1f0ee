from __future__ import annotations

import pytest

from httpize.config import load_config
from httpize.settings import Settings

_KEYS = (
    "HTTPIZE_HOST",
    "HTTPIZE_PORT",
    "HTTPIZE_MAX_ARGS",
    "HTTPIZE_LOG_LEVEL",
    "HTTPIZE_CONTENT_TYPE",
    "HTTPIZE_CACHE",
    "HTTPIZE_GZIP",
)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    cfg = load_config()
    assert cfg.host == "0.0.0.0"
    assert cfg.port == 8080
    assert cfg.max_args == 10
    assert cfg.log_level == "INFO"
    assert cfg.default_settings() == Settings.default()


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("HTTPIZE_PORT", "9000")
    monkeypatch.setenv("HTTPIZE_MAX_ARGS", "0")
    monkeypatch.setenv("HTTPIZE_LOG_LEVEL", "debug")
    monkeypatch.setenv("HTTPIZE_CONTENT_TYPE", "application/json")
    monkeypatch.setenv("HTTPIZE_CACHE", "60")
    monkeypatch.setenv("HTTPIZE_GZIP", "yes")
    cfg = load_config()
    assert cfg.port == 9000
    assert cfg.max_args == 0
    assert cfg.log_level == "DEBUG"
    assert cfg.default_settings() == Settings(content_type="application/json", cache=60, gzip=True)


@pytest.mark.parametrize(
    "key, value",
    [
        ("HTTPIZE_PORT", "70000"),
        ("HTTPIZE_PORT", "-1"),
        ("HTTPIZE_MAX_ARGS", "-2"),
        ("HTTPIZE_GZIP", "maybe"),
        ("HTTPIZE_CACHE", "soon"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        load_config()
