"""Authentication schemas."""

from pydantic import EmailStr, Field, field_validator

from bookstore.schemas.common import CamelModel
from bookstore.schemas.user import UserResponse


class UserRegister(CamelModel):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    age: int | None = Field(None, ge=1, le=150)
    device: str | None = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class UserLogin(CamelModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    device: str | None = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class LogoutRequest(CamelModel):
    """Logout request; the device whose sessions should end."""

    device: str | None = Field(None, max_length=255)


class AuthResponse(CamelModel):
    """Authentication response with token and user info."""

    message: str
    user: UserResponse
    access_token: str
    token_type: str = "bearer"  # noqa: S105


class TokenResponse(CamelModel):
    """Freshly minted access token."""

    message: str
    access_token: str
    token_type: str = "bearer"  # noqa: S105
