"""Pagination utilities for list endpoints (keyset on creation time)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.orm import Query as SQLAlchemyQuery


T = TypeVar("T")


@dataclass
class CursorPage(Generic[T]):
    """One page of a newest-first listing."""
    items: list[T]
    has_more: bool
    next_cursor: str | None


def encode_cursor(created_at: datetime) -> str:
    """Cursors are the ISO timestamp of the last row on the page."""
    return created_at.isoformat()


def decode_cursor(cursor: str) -> datetime:
    """
    Parse a cursor produced by encode_cursor.

    Raises:
        ValueError: If the cursor is not an ISO timestamp
    """
    try:
        return datetime.fromisoformat(cursor.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid cursor '{cursor}'")


def paginate_by_created_at(
    query: SQLAlchemyQuery,
    created_at_column: InstrumentedAttribute,
    limit: int,
    cursor: str | None = None,
) -> CursorPage:
    """
    Apply newest-first keyset pagination to a query.

    Over-fetches one row: has_more is True iff a (limit + 1)th row exists,
    and next_cursor is the creation time of the last row returned.
    """
    if cursor:
        query = query.filter(created_at_column < decode_cursor(cursor))

    rows = query.order_by(created_at_column.desc()).limit(limit + 1).all()
    has_more = len(rows) > limit
    items = rows[:limit]
    next_cursor = encode_cursor(items[-1].created_at) if has_more and items else None
    return CursorPage(items=items, has_more=has_more, next_cursor=next_cursor)
