import math

from fastapi import Query
from sqlalchemy import asc, desc


class PageParams:
    """Query parameters shared by the paginated list endpoints."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        search: str | None = Query(None, max_length=100),
        sort: str = Query("createdAt", max_length=50),
        order: str = Query("desc", pattern=r"^(asc|desc)$"),
    ):
        self.page = page
        self.limit = limit
        self.search = search.strip() if search and search.strip() else None
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def order_by(self, columns: dict, tiebreaker):
        """ORDER BY for ``self.sort`` drawn from ``columns``; unknown fields fall back to createdAt.

        ``tiebreaker`` (the primary key) follows the same direction so pages never overlap.
        """
        column = columns.get(self.sort, columns["createdAt"])
        direction = asc if self.order == "asc" else desc
        return [direction(column), direction(tiebreaker)]


def build_pagination(total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    has_next = page < total_pages
    has_prev = page > 1
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
        "items_per_page": limit,
        "has_next_page": has_next,
        "has_prev_page": has_prev,
        "next_page": page + 1 if has_next else None,
        "prev_page": page - 1 if has_prev else None,
    }
