from __future__ import annotations

import pytest

from httpize.args import SafeString
from httpize.errors import ApplicationError
from httpize.http import HttpRequest
from httpize.settings import MethodResult, Settings


@pytest.mark.parametrize("value", ["Gopher", "Go pher", "a.b@c_d-e,f", ""])
def test_safe_string_accepts(value: str) -> None:
    SafeString(value).check()


@pytest.mark.parametrize("value", ["Go'pher", "<script>", "a;b", "quote\""])
def test_safe_string_rejects(value: str) -> None:
    with pytest.raises(ApplicationError) as excinfo:
        SafeString(value).check()
    assert excinfo.value.code == 400


def test_settings_are_immutable() -> None:
    settings = Settings()
    with pytest.raises(AttributeError):
        settings.cache = 10  # type: ignore[misc]
    assert Settings.default() == Settings(content_type="text/html", cache=0, gzip=False)


def test_method_result_defaults() -> None:
    result = MethodResult(None)
    body, settings, error = result
    assert (body, settings, error) == (None, None, None)


def test_request_from_target_splits_path_and_query() -> None:
    request = HttpRequest.from_target("get", "/a/b/Echo?name=x", headers={"X-Thing": "1"})

    assert request.method == "GET"
    assert request.path == "/a/b/Echo"
    assert request.query == "name=x"
    assert request.header("x-thing") == "1"
    assert request.header("missing") == ""
