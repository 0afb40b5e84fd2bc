"""Pagination helpers for list endpoints."""


import math
from collections.abc import Callable, Sequence
from typing import Literal

from fastapi import Query
from pydantic import BaseModel

MAX_LIMIT = 100


def clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_LIMIT))


class PaginationParams:
    """Normalized `?page=1&limit=20&search=...&sortBy=created_at&sortOrder=desc`."""

    def __init__(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        sort: str = "created_at",
        order: str = "desc",
    ):
        self.page = page
        self.limit = clamp_limit(limit)
        self.search = search.strip() if search and search.strip() else None
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination_params(
    sort_fields: Sequence[str],
    *,
    default_sort: str = "created_at",
    default_limit: int = 20,
) -> Callable[..., PaginationParams]:
    """Build a FastAPI dependency whose `sortBy` only accepts `sort_fields`."""
    sort_literal = Literal[tuple(sort_fields)]

    def dependency(
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=default_limit, description="Items per page (clamped to 1..100)"),
        search: str | None = Query(default=None, max_length=200, description="Free-text search"),
        sort_by: sort_literal = Query(default=default_sort, alias="sortBy"),
        sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    ) -> PaginationParams:
        return PaginationParams(page, limit, search, sort_by, sort_order)

    return dependency


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 1,
        )
