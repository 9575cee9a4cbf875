from typing import List, Optional, Sequence, Tuple, TypeVar
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from social_network.config import settings
from social_network.exceptions import InvalidArgumentError

T = TypeVar("T")

def validate_page(limit: int, cursor: int) -> None:
    """Reject malformed limit/cursor pairs"""
    if limit is None or limit <= 0:
        raise InvalidArgumentError("Limit must be a positive integer")
    if limit > settings.MAX_PAGE_SIZE:
        raise InvalidArgumentError(f"Limit must not exceed {settings.MAX_PAGE_SIZE}")
    if cursor is None or cursor < 0:
        raise InvalidArgumentError("Cursor must be a non-negative integer")

def validate_id(value: int, name: str = "id") -> None:
    if value is None or value <= 0:
        raise InvalidArgumentError(f"Invalid {name}")

def split_page(rows: Sequence[T], limit: int, cursor: int) -> Tuple[List[T], Optional[int]]:
    """Trim a ``limit + 1`` fetch to the page and compute the next cursor"""
    items = list(rows[:limit])
    next_cursor = cursor + limit if len(rows) > limit else None
    return items, next_cursor

async def fetch_page(
    db: AsyncSession,
    stmt: Select,
    limit: int,
    cursor: int,
) -> Tuple[List, Optional[int]]:
    """Run an ordered scalar select as one offset/limit page"""
    validate_page(limit, cursor)
    result = await db.execute(stmt.offset(cursor).limit(limit + 1))
    return split_page(result.scalars().all(), limit, cursor)
