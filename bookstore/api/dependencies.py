"""FastAPI dependencies for authentication, authorization and services."""

from collections.abc import Callable, Iterable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bookstore.database import get_db
from bookstore.exceptions import ForbiddenError, UnauthorizedError
from bookstore.models.enums import Role
from bookstore.models.user import User
from bookstore.services.auth import decode_access_token, get_user_by_uid
from bookstore.services.book_service import BookService
from bookstore.services.purchase_service import PurchaseService
from bookstore.services.user_service import UserService

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Resolve the bearer access token to a live user."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authorized, no token provided")

    payload = decode_access_token(credentials.credentials)

    user = get_user_by_uid(db, payload["sub"])
    if user is None:
        raise UnauthorizedError("Not authorized, user not found or deleted")

    return user


def ensure_role(user: User, allowed: Iterable[Role]) -> User:
    """Check that the user's role is one of the allowed roles."""
    allowed_values = {Role(role).value for role in allowed}
    if not user.role or user.role not in allowed_values:
        raise ForbiddenError("Access denied. You do not have the required role.")
    return user


def ensure_not_self(caller: User, target_uid: str, message: str) -> None:
    """Refuse an admin action aimed at the caller's own account."""
    if caller.uid == target_uid:
        raise ForbiddenError(message)


def require_role(*roles: Role) -> Callable[..., User]:
    """Build a dependency that authenticates the caller and checks their role."""

    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        return ensure_role(current_user, roles)

    return dependency


require_admin = require_role(Role.ADMIN)
require_buyer = require_role(Role.USER)


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db)


def get_book_service(
    db: Annotated[Session, Depends(get_db)],
) -> BookService:
    """Get book service with dependencies."""
    return BookService(db)


def get_purchase_service(
    db: Annotated[Session, Depends(get_db)],
) -> PurchaseService:
    """Get purchase service with dependencies."""
    return PurchaseService(db)
