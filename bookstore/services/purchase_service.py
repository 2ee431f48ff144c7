"""Purchase service: move one unit of stock from a book to a buyer's tally.

The whole purchase runs in a single database transaction. The stock check is
repeated inside the UPDATE itself (``amount > 0``), so two buyers racing for
the last copy can never both succeed, whatever isolation level the database
runs at. Row locks (``SELECT ... FOR UPDATE``) are taken where the backend
supports them so the loser usually sees the post-decrement state right away.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import func, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from bookstore.config import get_settings
from bookstore.exceptions import BookstoreError, ConflictError, NotFoundError, ValidationError
from bookstore.models.book import Book
from bookstore.models.mixins import is_valid_public_id
from bookstore.models.user import User

logger = logging.getLogger(__name__)

OUT_OF_STOCK_MESSAGE = "Book is out of stock"
CONCURRENT_MODIFICATION_MESSAGE = (
    "Purchase could not be completed due to concurrent modification, please try again"
)


@dataclass(frozen=True)
class PurchaseReceipt:
    """What a successful purchase changed."""

    book_uid: str
    book_title: str
    remaining_stock: int
    user_uid: str
    total_purchased: int


class PurchaseService:
    """Service for buying books."""

    def __init__(self, db: Session, max_attempts: int | None = None):
        self.db = db
        self.max_attempts = max_attempts or get_settings().purchase_max_attempts

    def purchase(self, book_uid: str, buyer_id: int) -> PurchaseReceipt:
        """Buy one copy of a book for a user.

        Args:
            book_uid: Public id of the book
            buyer_id: Internal id of the authenticated buyer

        Raises:
            ValidationError: if the book id is malformed.
            NotFoundError: if the book or the buyer is missing or deleted.
            ConflictError: if the book is out of stock, or every attempt lost
                to a concurrent transaction.
        """
        if not is_valid_public_id(book_uid):
            raise ValidationError("Invalid book ID format")

        last_error: OperationalError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                receipt = self._purchase_once(book_uid, buyer_id)
                self.db.commit()
            except BookstoreError:
                self.db.rollback()
                raise
            except OperationalError as e:
                # Serialization failure, deadlock or lock timeout: nothing was kept
                self.db.rollback()
                last_error = e
                logger.warning(
                    f"Purchase of book {book_uid} attempt {attempt}/{self.max_attempts} "
                    f"aborted by the database: {e.orig}"
                )
                continue
            except Exception:
                self.db.rollback()
                raise

            logger.info(
                f"User {receipt.user_uid} bought book {receipt.book_uid}, "
                f"{receipt.remaining_stock} left"
            )
            return receipt

        raise ConflictError(CONCURRENT_MODIFICATION_MESSAGE) from last_error

    def _purchase_once(self, book_uid: str, buyer_id: int) -> PurchaseReceipt:
        """Run the purchase steps inside the current transaction. Does not commit."""
        book = Book.live(self.db).filter(Book.uid == book_uid).with_for_update().first()
        if book is None:
            raise NotFoundError("Book not found")
        if book.amount <= 0:
            raise ConflictError(OUT_OF_STOCK_MESSAGE)

        buyer = User.live(self.db).filter(User.id == buyer_id).with_for_update().first()
        if buyer is None:
            raise NotFoundError("User not found")

        decremented = self.db.execute(
            update(Book)
            .where(Book.id == book.id, Book.amount > 0, Book.deleted_at.is_(None))
            .values(amount=Book.amount - 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if decremented.rowcount != 1:
            # Someone else took the last copy after we read the row
            raise ConflictError(OUT_OF_STOCK_MESSAGE)

        credited = self.db.execute(
            update(User)
            .where(User.id == buyer.id, User.deleted_at.is_(None))
            .values(purchase_count=User.purchase_count + 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if credited.rowcount != 1:
            raise NotFoundError("User not found")

        self.db.refresh(book)
        self.db.refresh(buyer)
        return PurchaseReceipt(
            book_uid=book.uid,
            book_title=book.title,
            remaining_stock=book.amount,
            user_uid=buyer.uid,
            total_purchased=buyer.purchase_count,
        )
