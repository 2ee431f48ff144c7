"""User management service: own profile and admin operations."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.exceptions import ConflictError, NotFoundError, UnauthorizedError
from bookstore.models.enums import Role
from bookstore.models.mixins import is_valid_public_id
from bookstore.models.user import User
from bookstore.services.auth import (
    get_password_hash,
    get_user_by_email,
    revoke_all_refresh_tokens,
    verify_password,
)
from bookstore.services.pagination import PageRequest, PageResult, like_pattern, paginate

logger = logging.getLogger(__name__)


class UserService:
    """Service for user account operations."""

    def __init__(self, db: Session):
        self.db = db

    def list_users(
        self,
        page_request: PageRequest,
        role: Role | None = None,
        search: str | None = None,
    ) -> PageResult:
        """List live users, newest first, optionally filtered by role and name/email."""
        query = User.live(self.db)
        if role is not None:
            query = query.filter(User.role == role.value)
        if search and search.strip():
            pattern = like_pattern(search.strip())
            query = query.filter(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                )
            )
        query = query.order_by(User.created_at.desc(), User.id.desc())
        return paginate(query, page_request)

    def get_user(self, uid: str) -> User:
        """Get a live user by public id.

        Raises:
            NotFoundError: if the id is malformed or no live user has it.
        """
        if not is_valid_public_id(uid):
            raise NotFoundError("User not found")
        user = User.live(self.db).filter(User.uid == uid).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        user: User,
        name: str | None = None,
        age: int | None = None,
        email: str | None = None,
    ) -> User:
        """Update the caller's own profile. Only supplied fields change.

        Raises:
            ConflictError: if the new email belongs to another live user.
        """
        if email is not None:
            email = email.strip().lower()
            if email != user.email:
                existing = get_user_by_email(self.db, email)
                if existing and existing.id != user.id:
                    raise ConflictError("Email is already in use")
                user.email = email
        if name is not None:
            user.name = name
        if age is not None:
            user.age = age

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email is already in use") from e
        self.db.refresh(user)
        return user

    def change_password(self, user: User, old_password: str, new_password: str) -> None:
        """Change the caller's password and end all their sessions.

        Raises:
            UnauthorizedError: if the old password is wrong.
        """
        if not verify_password(old_password, user.password_hash):
            raise UnauthorizedError("Old password is incorrect")

        user.password_hash = get_password_hash(new_password)
        revoke_all_refresh_tokens(self.db, user)
        self.db.commit()
        logger.info(f"User {user.uid} changed their password")

    def change_role(self, target_uid: str, role: Role) -> User:
        """Set another user's role. The self-action guard runs in the API layer."""
        user = self.get_user(target_uid)
        user.role = role.value
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.uid} is now {role.value}")
        return user

    def delete_user(self, target_uid: str) -> User:
        """Soft-delete a user and revoke their sessions.

        Raises:
            NotFoundError: if the user is missing or already deleted.
        """
        user = self.get_user(target_uid)
        return self._soft_delete(user)

    def delete_own_account(self, user: User) -> User:
        """Soft-delete the caller's own account."""
        return self._soft_delete(user)

    def _soft_delete(self, user: User) -> User:
        user.soft_delete()
        revoke_all_refresh_tokens(self.db, user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Soft-deleted user {user.uid}")
        return user
