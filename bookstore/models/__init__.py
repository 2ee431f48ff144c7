"""SQLAlchemy models."""

from bookstore.models.book import Book
from bookstore.models.refresh_token import RefreshToken
from bookstore.models.user import User

__all__ = [
    "User",
    "Book",
    "RefreshToken",
]
