"""Access control tests: bearer token resolution and role checks."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from bookstore.api.dependencies import ensure_not_self, ensure_role
from bookstore.config import get_settings
from bookstore.exceptions import ForbiddenError
from bookstore.models.enums import Role
from bookstore.models.user import User
from bookstore.services.auth import create_refresh_token

settings = get_settings()


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_missing_token(client):
    """Test that protected endpoints require a token."""
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, no token provided"
    assert response.headers["www-authenticate"] == "Bearer"


def test_malformed_token(client):
    """Test that a malformed token is rejected."""
    response = client.get("/api/users/me", headers=_bearer("not.a.jwt"))
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, invalid token"


def test_token_signed_with_wrong_key(client, auth_headers):
    """Test that a token signed with another key is rejected."""
    token = jwt.encode(
        {
            "sub": auth_headers.user_id,
            "type": "access",
            "exp": datetime.now(UTC) + timedelta(minutes=5),
        },
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/users/me", headers=_bearer(token))
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, invalid token"


def test_expired_token(client, auth_headers):
    """Test that an expired token is rejected with a specific message."""
    token = jwt.encode(
        {
            "sub": auth_headers.user_id,
            "type": "access",
            "exp": datetime.now(UTC) - timedelta(minutes=1),
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/users/me", headers=_bearer(token))
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, token expired"


def test_refresh_token_is_not_an_access_token(client, auth_headers):
    """Test that a refresh token cannot be used as a bearer token."""
    token, _ = create_refresh_token(auth_headers.user_id)
    response = client.get("/api/users/me", headers=_bearer(token))
    assert response.status_code == 401


def test_token_of_deleted_user(client, auth_headers):
    """Test that a valid token for a soft-deleted user is rejected."""
    client.delete("/api/users/me", headers=auth_headers)

    response = client.get("/api/users/me", headers=auth_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, user not found or deleted"


def test_role_is_read_fresh_from_store(client, auth_headers, db):
    """Test that a role change applies to tokens issued before it."""
    response = client.get("/api/users", headers=auth_headers)
    assert response.status_code == 403

    db.query(User).filter(User.uid == auth_headers.user_id).update({User.role: "admin"})
    db.commit()

    response = client.get("/api/users", headers=auth_headers)
    assert response.status_code == 200


def test_ensure_role_allows_listed_role():
    """Test the capability check with an allowed role."""
    user = User(uid="u-1", role=Role.ADMIN.value)
    assert ensure_role(user, {Role.ADMIN}) is user


def test_ensure_role_rejects_other_role():
    """Test the capability check with a role outside the set."""
    user = User(uid="u-1", role=Role.USER.value)
    with pytest.raises(ForbiddenError, match="required role"):
        ensure_role(user, {Role.ADMIN})


def test_ensure_not_self():
    """Test the self-action guard."""
    admin = User(uid="u-1", role=Role.ADMIN.value)
    ensure_not_self(admin, "u-2", "nope")
    with pytest.raises(ForbiddenError, match="You cannot change your own role"):
        ensure_not_self(admin, "u-1", "You cannot change your own role")
