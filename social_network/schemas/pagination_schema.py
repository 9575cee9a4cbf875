from pydantic import BaseModel
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

T = TypeVar("T")

class Page(BaseModel, Generic[T]):
    """Offset-cursor page. ``next_cursor`` is None once the listing is exhausted."""
    items: List[T]
    limit: int
    cursor: int
    next_cursor: Optional[int] = None

def make_page(schema: Type[BaseModel], rows: Sequence[Any], limit: int, cursor: int, next_cursor: Optional[int]) -> Page:
    """Project ORM rows through ``schema`` into a Page"""
    return Page[schema](
        items=[schema.model_validate(row) for row in rows],
        limit=limit,
        cursor=cursor,
        next_cursor=next_cursor,
    )
