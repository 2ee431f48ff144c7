"""Offset pagination and search helpers."""

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Query

from bookstore.config import get_settings

# Largest OFFSET the database accepts (BIGINT)
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PageRequest:
    """A resolved page number and page size."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class PageResult:
    """A page of rows plus the totals needed to render pagination."""

    items: list[Any]
    total: int
    page: int
    page_size: int

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


def like_pattern(text: str) -> str:
    """Build a LIKE pattern matching 'text' as a literal substring."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _positive_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def resolve_page(page: Any = None, page_size: Any = None) -> PageRequest:
    """Turn raw query values into a page request.

    Missing or invalid values fall back to page 1 and the default page size;
    the page size is capped at the configured maximum, and the page so that
    its offset still fits a signed 64-bit column.
    """
    settings = get_settings()
    resolved_size = min(
        _positive_int(page_size) or settings.default_page_size, settings.max_page_size
    )
    last_page = MAX_OFFSET // resolved_size + 1
    resolved_page = min(_positive_int(page) or 1, last_page)
    return PageRequest(page=resolved_page, page_size=resolved_size)


def paginate(query: Query, page_request: PageRequest) -> PageResult:
    """Run a query for one page. The query must already be ordered."""
    total = query.order_by(None).count()
    items = query.offset(page_request.offset).limit(page_request.page_size).all()
    return PageResult(
        items=items,
        total=total,
        page=page_request.page,
        page_size=page_request.page_size,
    )
