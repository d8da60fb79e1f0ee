from __future__ import annotations

import pytest

from httpize.errors import ApplicationError
from httpize.responses import error_response, internal_error


@pytest.mark.parametrize("code", [301, 302, 303])
def test_redirect_codes_set_location(code: int) -> None:
    response = error_response(ApplicationError(code, "Moved", "http://lookhere"))

    assert response.status == code
    assert response.headers["Location"] == "http://lookhere"
    assert response.body == b"Moved\n"


def test_non_redirect_ignores_location() -> None:
    response = error_response(ApplicationError(307, "Temporary Redirect", "http://lookhere"))

    assert response.status == 307
    assert "Location" not in response.headers


def test_client_error_keeps_message() -> None:
    response = error_response(ApplicationError(403, "Forbidden"))

    assert response.status == 403
    assert response.body == b"Forbidden\n"
    assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_unclassified_error_is_opaque() -> None:
    response = error_response(ValueError("secret detail"))

    assert response.status == 500
    assert response.body == internal_error().body == b"error\n"
