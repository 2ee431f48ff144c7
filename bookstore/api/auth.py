"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from bookstore.api.dependencies import get_current_user
from bookstore.config import get_settings
from bookstore.database import get_db
from bookstore.exceptions import UnauthorizedError
from bookstore.models.user import User
from bookstore.schemas.auth import (
    AuthResponse,
    LogoutRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from bookstore.schemas.common import MessageResponse
from bookstore.schemas.user import UserResponse
from bookstore.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    issue_refresh_token,
    refresh_access_token,
    revoke_refresh_tokens,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

settings = get_settings()


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.refresh_token_max_age,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    user = create_user(db, user_data.name, user_data.email, user_data.password, user_data.age)

    refresh_token = issue_refresh_token(db, user, user_data.device, _client_ip(request))
    _set_refresh_cookie(response, refresh_token)

    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.from_model(user),
        access_token=create_access_token(user.uid),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)

    refresh_token = issue_refresh_token(db, user, credentials.device, _client_ip(request))
    _set_refresh_cookie(response, refresh_token)
    logger.info(f"User {user.uid} logged in")

    return AuthResponse(
        message="Login successful",
        user=UserResponse.from_model(user),
        access_token=create_access_token(user.uid),
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Mint a new access token from the refresh token cookie."""
    token = request.cookies.get(settings.refresh_cookie_name)
    if not token:
        raise UnauthorizedError("Refresh token is required")

    return TokenResponse(
        message="Token refreshed successfully",
        access_token=refresh_access_token(db, token),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    body: LogoutRequest | None = None,
):
    """Logout from this device: revoke the cookie's token and the device's tokens."""
    token = request.cookies.get(settings.refresh_cookie_name)
    device = body.device if body else None
    revoke_refresh_tokens(db, current_user, token=token, device=device)

    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="Logged out from this device")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return UserResponse.from_model(current_user)
