"""User API tests: own account and admin management."""

import uuid

from bookstore.models.enums import Role
from bookstore.models.user import User


def test_get_own_profile(client, auth_headers):
    """Test reading the caller's profile."""
    response = client.get("/api/users/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == auth_headers.user_id
    assert data["purchaseCount"] == 0
    assert "passwordHash" not in data


def test_update_own_profile(client, auth_headers):
    """Test that only supplied profile fields change."""
    response = client.put("/api/users/me", headers=auth_headers, json={"age": 42})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["age"] == 42
    assert data["name"] == "Test User"
    assert data["email"] == auth_headers.email


def test_update_own_email_conflict(client, auth_headers, make_user):
    """Test that an email owned by another live user is refused."""
    other = make_user("other@example.com")

    response = client.put("/api/users/me", headers=auth_headers, json={"email": other.email})
    assert response.status_code == 409


def test_update_own_profile_validation(client, auth_headers):
    """Test profile validation."""
    response = client.put("/api/users/me", headers=auth_headers, json={"name": "X", "age": 0})
    assert response.status_code == 400


def test_change_password(client, auth_headers):
    """Test changing the password and logging in with the new one."""
    response = client.put(
        "/api/users/me/password",
        headers=auth_headers,
        json={"oldPassword": "testpass123", "newPassword": "brandnew456"},
    )
    assert response.status_code == 200

    old = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    new = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "brandnew456"}
    )
    assert old.status_code == 401
    assert new.status_code == 200


def test_change_password_revokes_sessions(client, auth_headers):
    """Test that a password change ends every refresh session."""
    client.put(
        "/api/users/me/password",
        headers=auth_headers,
        json={"oldPassword": "testpass123", "newPassword": "brandnew456"},
    )
    response = client.post("/api/auth/refresh")
    assert response.status_code == 403


def test_change_password_wrong_old_password(client, auth_headers):
    """Test that the old password must match."""
    response = client.put(
        "/api/users/me/password",
        headers=auth_headers,
        json={"oldPassword": "wrongpass", "newPassword": "brandnew456"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Old password is incorrect"


def test_change_password_must_differ(client, auth_headers):
    """Test that the new password must differ from the old one."""
    response = client.put(
        "/api/users/me/password",
        headers=auth_headers,
        json={"oldPassword": "testpass123", "newPassword": "testpass123"},
    )
    assert response.status_code == 400


def test_delete_own_account(client, auth_headers, db):
    """Test soft-deleting the caller's own account."""
    response = client.delete("/api/users/me", headers=auth_headers)
    assert response.status_code == 200

    user = db.query(User).filter(User.uid == auth_headers.user_id).one()
    assert user.is_deleted


def test_list_users_requires_admin(client, auth_headers):
    """Test that regular users cannot list accounts."""
    response = client.get("/api/users", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Access denied. You do not have the required role."


def test_list_users(client, admin_headers, make_user):
    """Test listing users with pagination envelope."""
    make_user("alice@example.com", name="Alice")
    make_user("bob@example.com", name="Bob")

    response = client.get("/api/users", headers=admin_headers, params={"pageSize": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["count"] == 2
    assert data["totalPages"] == 2
    assert data["currentPage"] == 1


def test_list_users_filters(client, admin_headers, make_user):
    """Test role filter and name/email search."""
    make_user("alice@example.com", name="Alice")
    make_user("bob@example.com", name="Bob")

    admins = client.get("/api/users", headers=admin_headers, params={"role": "admin"}).json()
    assert [user["email"] for user in admins["data"]] == [admin_headers.email]

    found = client.get("/api/users", headers=admin_headers, params={"search": "ALI"}).json()
    assert [user["name"] for user in found["data"]] == ["Alice"]


def test_list_users_excludes_deleted(client, admin_headers, make_user):
    """Test that soft-deleted users are not listed."""
    gone = make_user("gone@example.com")
    client.delete(f"/api/users/{gone.user_id}", headers=admin_headers)

    response = client.get("/api/users", headers=admin_headers)
    emails = [user["email"] for user in response.json()["data"]]
    assert "gone@example.com" not in emails


def test_get_user_by_id(client, admin_headers, auth_headers):
    """Test fetching a user by public id."""
    response = client.get(f"/api/users/{auth_headers.user_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_get_user_unknown_or_malformed_id(client, admin_headers):
    """Test that unknown and malformed ids are both not found."""
    unknown = client.get(f"/api/users/{uuid.uuid4()}", headers=admin_headers)
    malformed = client.get("/api/users/12345", headers=admin_headers)
    assert unknown.status_code == 404
    assert malformed.status_code == 404


def test_change_role(client, admin_headers, auth_headers):
    """Test promoting another user."""
    response = client.put(
        f"/api/users/{auth_headers.user_id}/role", headers=admin_headers, json={"role": "admin"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"


def test_change_own_role_forbidden(client, admin_headers, db):
    """Test that an admin cannot change their own role."""
    response = client.put(
        f"/api/users/{admin_headers.user_id}/role", headers=admin_headers, json={"role": "user"}
    )
    assert response.status_code == 403
    assert response.json()["message"] == "You cannot change your own role"

    user = db.query(User).filter(User.uid == admin_headers.user_id).one()
    assert user.role == Role.ADMIN.value


def test_change_role_invalid_value(client, admin_headers, auth_headers):
    """Test that unknown roles are rejected."""
    response = client.put(
        f"/api/users/{auth_headers.user_id}/role", headers=admin_headers, json={"role": "owner"}
    )
    assert response.status_code == 400


def test_change_role_requires_admin(client, auth_headers, make_user):
    """Test that regular users cannot change roles."""
    other = make_user("other@example.com")
    response = client.put(
        f"/api/users/{other.user_id}/role", headers=auth_headers, json={"role": "admin"}
    )
    assert response.status_code == 403


def test_admin_delete_user(client, admin_headers, auth_headers):
    """Test soft-deleting another user, and that a second delete is not found."""
    first = client.delete(f"/api/users/{auth_headers.user_id}", headers=admin_headers)
    second = client.delete(f"/api/users/{auth_headers.user_id}", headers=admin_headers)
    assert first.status_code == 200
    assert second.status_code == 404


def test_admin_delete_self_forbidden(client, admin_headers, db):
    """Test that admins must use the own-account route to delete themselves."""
    response = client.delete(f"/api/users/{admin_headers.user_id}", headers=admin_headers)
    assert response.status_code == 403
    assert "DELETE /api/users/me" in response.json()["message"]

    user = db.query(User).filter(User.uid == admin_headers.user_id).one()
    assert not user.is_deleted


def test_update_own_name_is_stripped(client, auth_headers):
    """Test that surrounding whitespace is dropped from the name."""
    response = client.put("/api/users/me", headers=auth_headers, json={"name": "  Ada  "})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Ada"


def test_update_own_name_blank(client, auth_headers, db):
    """Test that a whitespace-only name is rejected and nothing is saved."""
    response = client.put("/api/users/me", headers=auth_headers, json={"name": "    "})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"

    user = db.query(User).filter(User.uid == auth_headers.user_id).one()
    assert user.name == "Test User"
