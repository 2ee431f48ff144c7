"""Error handler tests."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bookstore.api.errors import register_exception_handlers
from bookstore.exceptions import (
    BookstoreError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


@pytest.fixture
def error_client():
    """A bare app with the bookstore error handlers and a few failing routes."""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{kind}")
    def raise_error(kind: str):
        errors = {
            "validation": ValidationError("Bad input"),
            "unauthorized": UnauthorizedError("Who are you"),
            "forbidden": ForbiddenError("Not for you"),
            "not_found": NotFoundError("Nothing here"),
            "conflict": ConflictError("Already there", code="DUPLICATE"),
        }
        raise errors[kind]

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.get("/typed")
    def typed(limit: int):
        return {"limit": limit}

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("kind", "status_code", "code"),
    [
        ("validation", 400, "VALIDATION_ERROR"),
        ("unauthorized", 401, "UNAUTHORIZED"),
        ("forbidden", 403, "FORBIDDEN"),
        ("not_found", 404, "NOT_FOUND"),
        ("conflict", 409, "DUPLICATE"),
    ],
)
def test_domain_errors(error_client, kind, status_code, code):
    """Test that each domain error maps to its status code."""
    response = error_client.get(f"/raise/{kind}")
    assert response.status_code == status_code
    assert response.json()["code"] == code
    assert response.json()["message"]


def test_unauthorized_carries_challenge(error_client):
    response = error_client.get("/raise/unauthorized")
    assert response.headers["www-authenticate"] == "Bearer"


def test_request_validation_lists_fields(error_client):
    """Test that framework validation errors become a 400 with field details."""
    response = error_client.get("/typed", params={"limit": "many"})
    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Validation failed"
    assert data["errors"][0]["field"] == "limit"


def test_unexpected_error_is_generic(error_client):
    """Test that unexpected exceptions do not leak details."""
    response = error_client.get("/boom")
    assert response.status_code == 500
    data = response.json()
    assert data == {"message": "Internal server error", "code": "INTERNAL_ERROR"}


def test_unexpected_error_detail_in_debug(error_client):
    """Test that debug mode adds the exception to the body."""
    with patch("bookstore.api.errors.get_settings", return_value=SimpleNamespace(debug=True)):
        response = error_client.get("/boom")
    assert response.status_code == 500
    assert response.json()["error"] == "RuntimeError: kaboom"


def test_error_default_code():
    """Test that subclasses supply their own code unless overridden."""
    assert NotFoundError("x").code == "NOT_FOUND"
    assert ConflictError("x", code="OUT_OF_STOCK").code == "OUT_OF_STOCK"
    assert BookstoreError("x").status_code == 500
