"""User API endpoints: own account and admin management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from bookstore.api.dependencies import (
    ensure_not_self,
    get_current_user,
    get_user_service,
    require_admin,
)
from bookstore.models.enums import Role
from bookstore.models.user import User
from bookstore.schemas.common import MessageResponse, Page
from bookstore.schemas.user import PasswordChange, ProfileUpdate, RoleUpdate, UserResponse
from bookstore.services.pagination import resolve_page
from bookstore.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


# Own account


@router.get("/me", response_model=UserResponse)
def get_own_profile(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the caller's profile."""
    return UserResponse.from_model(current_user)


@router.put("/me", response_model=MessageResponse[UserResponse])
def update_own_profile(
    profile: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Update the caller's name, age or email."""
    user = service.update_profile(
        current_user,
        name=profile.name,
        age=profile.age,
        email=profile.email,
    )
    return MessageResponse(
        message="Profile updated successfully", data=UserResponse.from_model(user)
    )


@router.put("/me/password", response_model=MessageResponse)
def change_own_password(
    passwords: PasswordChange,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Change the caller's password. Signs out every device."""
    service.change_password(current_user, passwords.old_password, passwords.new_password)
    return MessageResponse(message="Password changed successfully")


@router.delete("/me", response_model=MessageResponse)
def delete_own_account(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Soft-delete the caller's account."""
    service.delete_own_account(current_user)
    return MessageResponse(message="Account deleted successfully")


# Admin


@router.get("", response_model=Page[UserResponse])
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
    page: str | None = None,
    page_size: Annotated[str | None, Query(alias="pageSize")] = None,
    role: Role | None = None,
    search: str | None = None,
):
    """List users with pagination, role filter and name/email search."""
    result = service.list_users(resolve_page(page, page_size), role=role, search=search)
    return Page(
        count=result.count,
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.page,
        data=[UserResponse.from_model(user) for user in result.items],
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    _admin: Annotated[User, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user by id."""
    return UserResponse.from_model(service.get_user(user_id))


@router.put("/{user_id}/role", response_model=MessageResponse[UserResponse])
def update_user_role(
    user_id: str,
    role_update: RoleUpdate,
    admin: Annotated[User, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Change another user's role."""
    ensure_not_self(admin, user_id, "You cannot change your own role")
    user = service.change_role(user_id, role_update.role)
    return MessageResponse(message="Role updated successfully", data=UserResponse.from_model(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: Annotated[User, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Soft-delete another user."""
    ensure_not_self(
        admin, user_id, "You cannot delete your own account here, use DELETE /api/users/me"
    )
    service.delete_user(user_id)
    return MessageResponse(message="User soft deleted successfully")
