"""Catalog service for book management and browsing."""

import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from bookstore.exceptions import ConflictError, NotFoundError
from bookstore.models.book import Book
from bookstore.models.mixins import is_valid_public_id
from bookstore.models.user import User
from bookstore.services.pagination import PageRequest, PageResult, like_pattern, paginate

logger = logging.getLogger(__name__)

DEFAULT_SORT = "-createdAt"

# Public sort key -> ORDER BY clauses (id breaks ties deterministically)
SORT_OPTIONS: dict[str, tuple[Any, ...]] = {
    "-createdAt": (Book.created_at.desc(), Book.id.desc()),
    "createdAt": (Book.created_at.asc(), Book.id.asc()),
    "title": (func.lower(Book.title).asc(), Book.id.asc()),
    "-title": (func.lower(Book.title).desc(), Book.id.desc()),
    "amount": (Book.amount.asc(), Book.id.asc()),
    "-amount": (Book.amount.desc(), Book.id.desc()),
}

DUPLICATE_TITLE_MESSAGE = "A book with this title already exists"


class BookService:
    """Service for catalog operations."""

    def __init__(self, db: Session):
        self.db = db

    def list_books(
        self,
        page_request: PageRequest,
        search: str | None = None,
        sort: str | None = None,
        creator: User | None = None,
    ) -> PageResult:
        """List live books.

        Search matches title or description as a case-insensitive substring.
        Unknown sort keys fall back to newest first.
        """
        query = Book.live(self.db)
        if creator is not None:
            query = query.filter(Book.created_by_id == creator.id)
        if search and search.strip():
            pattern = like_pattern(search.strip())
            query = query.filter(
                or_(
                    Book.title.ilike(pattern, escape="\\"),
                    Book.description.ilike(pattern, escape="\\"),
                )
            )
        query = query.order_by(*SORT_OPTIONS.get(sort or DEFAULT_SORT, SORT_OPTIONS[DEFAULT_SORT]))
        return paginate(query, page_request)

    def list_books_by_creator(
        self,
        creator: User,
        page_request: PageRequest,
        search: str | None = None,
        sort: str | None = None,
    ) -> PageResult:
        """List live books created by the given user."""
        return self.list_books(page_request, search=search, sort=sort, creator=creator)

    def get_book(self, uid: str) -> Book:
        """Get a live book by public id.

        Raises:
            NotFoundError: if the id is malformed or no live book has it.
        """
        if not is_valid_public_id(uid):
            raise NotFoundError("Book not found")
        book = Book.live(self.db).filter(Book.uid == uid).first()
        if not book:
            raise NotFoundError("Book not found")
        return book

    def create_book(self, title: str, description: str, amount: int, creator: User) -> Book:
        """Create a book.

        Raises:
            ConflictError: if a live book already has this title (any case).
        """
        self._ensure_title_available(title)
        book = Book(
            title=title,
            description=description,
            amount=amount,
            created_by_id=creator.id,
        )
        self.db.add(book)
        self._commit()
        self.db.refresh(book)
        logger.info(f"Created book {book.uid} '{book.title}' with {book.amount} in stock")
        return book

    def update_book(self, uid: str, fields: dict[str, Any]) -> Book:
        """Apply a partial update to a book.

        Raises:
            NotFoundError: if the book is missing or deleted.
            ConflictError: if the new title is taken by another live book.
        """
        book = self.get_book(uid)

        title = fields.get("title")
        if title is not None and title.lower() != book.title.lower():
            self._ensure_title_available(title, exclude_id=book.id)

        for field in ("title", "description", "amount"):
            if fields.get(field) is not None:
                setattr(book, field, fields[field])

        self._commit()
        self.db.refresh(book)
        logger.info(f"Updated book {book.uid}")
        return book

    def delete_book(self, uid: str) -> Book:
        """Soft-delete a book. Stock and purchase history stay as they are.

        Raises:
            NotFoundError: if the book is missing or already deleted.
        """
        book = self.get_book(uid)
        book.soft_delete()
        self.db.commit()
        logger.info(f"Soft-deleted book {book.uid}")
        return book

    def _titles_matching(self, title: str) -> Query:
        return Book.live(self.db).filter(func.lower(Book.title) == title.strip().lower())

    def _ensure_title_available(self, title: str, exclude_id: int | None = None) -> None:
        query = self._titles_matching(title)
        if exclude_id is not None:
            query = query.filter(Book.id != exclude_id)
        if query.first():
            raise ConflictError(DUPLICATE_TITLE_MESSAGE)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            # The partial unique index caught a concurrent duplicate title
            self.db.rollback()
            raise ConflictError(DUPLICATE_TITLE_MESSAGE) from e
