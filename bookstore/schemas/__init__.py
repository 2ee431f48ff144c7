"""Pydantic schemas for API requests and responses."""

from bookstore.schemas.auth import (
    AuthResponse,
    LogoutRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from bookstore.schemas.book import (
    BookCreate,
    BookResponse,
    BookUpdate,
    PurchaseRequest,
    PurchaseResponse,
)
from bookstore.schemas.common import MessageResponse, Page
from bookstore.schemas.user import PasswordChange, ProfileUpdate, RoleUpdate, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "LogoutRequest",
    "AuthResponse",
    "TokenResponse",
    "UserResponse",
    "ProfileUpdate",
    "PasswordChange",
    "RoleUpdate",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "PurchaseRequest",
    "PurchaseResponse",
    "MessageResponse",
    "Page",
]
