"""Book API endpoints: public catalog, admin management and purchases."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from bookstore.api.dependencies import (
    get_book_service,
    get_purchase_service,
    require_admin,
    require_buyer,
)
from bookstore.models.user import User
from bookstore.schemas.book import (
    BookCreate,
    BookResponse,
    BookUpdate,
    PurchasedBook,
    PurchaseRequest,
    PurchaseResponse,
    PurchasingUser,
)
from bookstore.schemas.common import MessageResponse, Page
from bookstore.services.book_service import BookService
from bookstore.services.pagination import PageResult, resolve_page
from bookstore.services.purchase_service import PurchaseService

router = APIRouter(prefix="/api/books", tags=["books"])


def _book_page(result: PageResult) -> Page[BookResponse]:
    return Page(
        count=result.count,
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.page,
        data=[BookResponse.from_model(book) for book in result.items],
    )


@router.get("", response_model=Page[BookResponse])
def list_books(
    service: Annotated[BookService, Depends(get_book_service)],
    page: str | None = None,
    page_size: Annotated[str | None, Query(alias="pageSize")] = None,
    search: str | None = None,
    sort: str | None = None,
):
    """List books, newest first unless another sort key is given."""
    result = service.list_books(resolve_page(page, page_size), search=search, sort=sort)
    return _book_page(result)


@router.get("/my-books", response_model=Page[BookResponse])
def list_my_books(
    admin: Annotated[User, Depends(require_admin)],
    service: Annotated[BookService, Depends(get_book_service)],
    page: str | None = None,
    page_size: Annotated[str | None, Query(alias="pageSize")] = None,
    search: str | None = None,
    sort: str | None = None,
):
    """List the books the calling admin created."""
    result = service.list_books_by_creator(
        admin, resolve_page(page, page_size), search=search, sort=sort
    )
    return _book_page(result)


@router.post("/buy", response_model=MessageResponse[PurchaseResponse])
def buy_book(
    purchase: PurchaseRequest,
    buyer: Annotated[User, Depends(require_buyer)],
    service: Annotated[PurchaseService, Depends(get_purchase_service)],
):
    """Buy one copy of a book."""
    receipt = service.purchase(purchase.book_id, buyer.id)
    return MessageResponse(
        message="Book purchased successfully",
        data=PurchaseResponse(
            book=PurchasedBook(
                id=receipt.book_uid,
                title=receipt.book_title,
                remaining_stock=receipt.remaining_stock,
            ),
            user=PurchasingUser(id=receipt.user_uid, total_purchased=receipt.total_purchased),
        ),
    )


@router.post("", response_model=MessageResponse[BookResponse], status_code=status.HTTP_201_CREATED)
def create_book(
    book_data: BookCreate,
    admin: Annotated[User, Depends(require_admin)],
    service: Annotated[BookService, Depends(get_book_service)],
):
    """Create a book."""
    book = service.create_book(book_data.title, book_data.description, book_data.amount, admin)
    return MessageResponse(message="Book created successfully", data=BookResponse.from_model(book))


@router.get("/{book_id}", response_model=BookResponse)
def get_book(
    book_id: str,
    service: Annotated[BookService, Depends(get_book_service)],
):
    """Get a book by id."""
    return BookResponse.from_model(service.get_book(book_id))


@router.put("/{book_id}", response_model=MessageResponse[BookResponse])
def update_book(
    book_id: str,
    book_data: BookUpdate,
    _admin: Annotated[User, Depends(require_admin)],
    service: Annotated[BookService, Depends(get_book_service)],
):
    """Update a book. Only supplied fields change."""
    book = service.update_book(book_id, book_data.model_dump(exclude_unset=True))
    return MessageResponse(message="Book updated successfully", data=BookResponse.from_model(book))


@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(
    book_id: str,
    _admin: Annotated[User, Depends(require_admin)],
    service: Annotated[BookService, Depends(get_book_service)],
):
    """Soft-delete a book."""
    service.delete_book(book_id)
    return MessageResponse(message="Book deleted successfully")
