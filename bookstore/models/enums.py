"""Enums for model fields."""

from enum import Enum


class Role(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"
