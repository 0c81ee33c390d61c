"""Response envelope shared by every endpoint."""

from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


def strip_required(value: str) -> str:
    """Trim surrounding whitespace and reject blank strings."""
    value = value.strip()
    if not value:
        raise ValueError("Field cannot be blank")
    return value


# bcrypt only accepts passwords up to 72 bytes
PASSWORD_MAX_BYTES = 72


def check_password_bytes(value: str) -> str:
    """Reject passwords whose UTF-8 encoding is longer than bcrypt accepts."""
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes")
    return value


class Envelope(BaseModel, Generic[DataT]):
    """`{success, data, message, error}` wrapper."""

    success: bool = True
    data: DataT | None = None
    message: str | None = None
    error: str | None = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    per_page: int
    total: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=max(1, math.ceil(total / per_page)),
            per_page=per_page,
            total=total,
        )


class PaginatedEnvelope(BaseModel, Generic[DataT]):
    """Envelope for list endpoints that page their results."""

    success: bool = True
    data: list[DataT] = Field(default_factory=list)
    pagination: Pagination
    message: str | None = None


__all__ = ["strip_required", "PASSWORD_MAX_BYTES", "check_password_bytes", "DataT", "Envelope", "Pagination", "PaginatedEnvelope"]
