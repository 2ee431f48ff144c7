"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bookstore.database import Base, get_db
from bookstore.main import app
from bookstore.models.enums import Role
from bookstore.models.user import User


class AuthHeaders(dict):
    """Dict subclass that also stores the user's public id and email."""

    def __init__(self, *args, user_id: str | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/bookstore", "/bookstore_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def session_factory():
    """Factory for extra sessions, e.g. to play a concurrent request."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # https so the Secure refresh token cookie is sent back
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client, db):
    """Factory registering users through the API and returning their auth headers."""

    def _make_user(
        email: str,
        password: str = "testpass123",
        name: str = "Test User",
        role: Role = Role.USER,
        **extra,
    ) -> AuthHeaders:
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name, **extra},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        headers = AuthHeaders(
            {"Authorization": f"Bearer {data['accessToken']}"},
            user_id=data["user"]["id"],
            email=email,
        )
        if role != Role.USER:
            db.query(User).filter(User.uid == headers.user_id).update({User.role: role.value})
            db.commit()
        return headers

    return _make_user


@pytest.fixture
def auth_headers(make_user):
    """Create a regular user and return auth headers with user info."""
    return make_user("test@example.com")


@pytest.fixture
def admin_headers(make_user):
    """Create an admin user and return auth headers with user info."""
    return make_user("admin@example.com", name="Admin User", role=Role.ADMIN)


@pytest.fixture
def make_book(client):
    """Factory creating books through the API and returning their JSON."""

    def _make_book(
        headers,
        title: str = "Dune",
        amount: int = 1,
        description: str = "Sci-fi epic with more than ten characters",
    ) -> dict:
        response = client.post(
            "/api/books",
            headers=headers,
            json={"title": title, "description": description, "amount": amount},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make_book
