"""Shared schema building blocks."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON keys and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel, Generic[T]):
    """Mutation response: a human readable message and optional payload."""

    message: str
    data: T | None = None


class Page(CamelModel, Generic[T]):
    """One page of a collection."""

    count: int
    total: int
    total_pages: int
    current_page: int
    data: list[T]
