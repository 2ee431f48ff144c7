"""Mixins for SQLAlchemy models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import Query, Session


def new_public_id() -> str:
    """Generate a new opaque public identifier."""
    return str(uuid.uuid4())


def is_valid_public_id(value: str | None) -> bool:
    """Check that a value is a well-formed public identifier (a UUID)."""
    if not value or not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PublicIdMixin:
    """Mixin to add an immutable public identifier exposed by the API."""

    uid = Column(String(36), unique=True, nullable=False, index=True, default=new_public_id)


class SoftDeleteMixin:
    """Mixin to add soft delete functionality."""

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        """Check if the record is soft-deleted."""
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        """Soft delete the record."""
        self.deleted_at = datetime.now(UTC)

    @classmethod
    def live(cls, db: Session, include_deleted: bool = False) -> Query:
        """Query records of this model, excluding soft-deleted ones.

        Every read path goes through here so the exclusion is explicit.
        Pass ``include_deleted=True`` to see deleted rows as well.
        """
        query = db.query(cls)
        if not include_deleted:
            query = query.filter(cls.deleted_at.is_(None))
        return query
