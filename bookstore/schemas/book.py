"""Book and purchase schemas."""

from datetime import datetime

from pydantic import Field, StrictInt, field_validator

from bookstore.models.book import Book
from bookstore.schemas.common import CamelModel


class BookCreate(CamelModel):
    """Create a new book."""

    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    amount: StrictInt = Field(..., ge=1)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class BookUpdate(CamelModel):
    """Update a book. Only supplied fields change."""

    title: str | None = Field(None, min_length=2, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=2000)
    amount: StrictInt | None = Field(None, ge=0)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class BookResponse(CamelModel):
    """Book response."""

    id: str
    title: str
    description: str
    amount: int
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, book: Book) -> "BookResponse":
        return cls(
            id=book.uid,
            title=book.title,
            description=book.description,
            amount=book.amount,
            created_by=book.creator.uid,
            created_at=book.created_at,
            updated_at=book.updated_at,
        )


class PurchaseRequest(CamelModel):
    """Buy one copy of a book."""

    book_id: str = Field(..., min_length=1, max_length=64)


class PurchasedBook(CamelModel):
    id: str
    title: str
    remaining_stock: int


class PurchasingUser(CamelModel):
    id: str
    total_purchased: int


class PurchaseResponse(CamelModel):
    """Outcome of a successful purchase."""

    book: PurchasedBook
    user: PurchasingUser
