"""Book model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from bookstore.database import Base
from bookstore.models.mixins import PublicIdMixin, SoftDeleteMixin, TimestampMixin


class Book(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    """Book in the catalog with its purchasable stock."""

    __tablename__ = "books"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_books_amount_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    # Weak reference: deleting the creator does not touch their books
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    creator = relationship("User", backref="books")


# Titles are unique case-insensitively among books that are not soft-deleted
Index(
    "uq_books_title_active",
    func.lower(Book.title),
    unique=True,
    postgresql_where=Book.deleted_at.is_(None),
    sqlite_where=Book.deleted_at.is_(None),
)
