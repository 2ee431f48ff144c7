"""User schemas."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from bookstore.models.enums import Role
from bookstore.models.user import User
from bookstore.schemas.common import CamelModel


class UserResponse(CamelModel):
    """User information response. Never carries the password hash."""

    id: str
    name: str
    email: str
    role: Role
    age: int | None
    purchase_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.uid,
            name=user.name,
            email=user.email,
            role=Role(user.role),
            age=user.age,
            purchase_count=user.purchase_count,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ProfileUpdate(CamelModel):
    """Update own profile. Only supplied fields change."""

    name: str | None = Field(None, min_length=2, max_length=255)
    age: int | None = Field(None, ge=1, le=150)
    email: EmailStr | None = Field(None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else None


class PasswordChange(CamelModel):
    """Change own password."""

    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)

    @model_validator(mode="after")
    def passwords_differ(self) -> "PasswordChange":
        if self.old_password == self.new_password:
            raise ValueError("New password must be different from old password")
        return self


class RoleUpdate(CamelModel):
    """Change another user's role."""

    role: Role
