"""Offset pagination for ORM queries."""

from typing import Any

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, per_page: int) -> tuple[list[Any], int]:
    """Return one page of `query` and the total row count."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total
