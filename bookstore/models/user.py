"""User model."""

from sqlalchemy import CheckConstraint, Column, Index, Integer, String
from sqlalchemy.orm import relationship

from bookstore.database import Base
from bookstore.models.enums import Role
from bookstore.models.mixins import PublicIdMixin, SoftDeleteMixin, TimestampMixin

class User(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    """User model for authentication, roles and purchase tally."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("purchase_count >= 0", name="ck_users_purchase_count_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)  # always lowercase
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)  # 'user', 'admin'
    age = Column(Integer, nullable=True)
    purchase_count = Column(Integer, nullable=False, default=0)

    # Relationships
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )


# Email is unique only among users that are not soft-deleted
Index(
    "uq_users_email_active",
    User.email,
    unique=True,
    postgresql_where=User.deleted_at.is_(None),
    sqlite_where=User.deleted_at.is_(None),
)
