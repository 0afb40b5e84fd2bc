"""Filtered, sorted, paginated SELECT plus its matching COUNT.

Every list endpoint goes through ``ListQuery`` so that search, filters,
ordering and pagination behave identically across resources. User input only
ever reaches the database as bound parameters.
"""


from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from grifo.core.pagination import PaginationParams

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term is matched literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def search_clause(term: str, columns: Iterable[Any]) -> ColumnElement[bool]:
    pattern = f"%{escape_like(term)}%"
    return or_(*(col.ilike(pattern, escape=LIKE_ESCAPE) for col in columns))


def start_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def end_of_day(value: date | datetime) -> datetime:
    """Inclusive upper bound: a bare date covers the whole day."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


class ListQuery:
    """Accumulates WHERE clauses, then runs one page query and one count query.

    ``sort_columns`` maps each allow-listed ``sortBy`` value to a column;
    ``search_columns`` is the only set of columns free text is matched against.
    Rows are always ordered by the sort column and then by primary key.
    """

    def __init__(
        self,
        model: Any,
        *,
        sort_columns: Mapping[str, Any],
        search_columns: Iterable[Any] = (),
        base: Select | None = None,
    ):
        self.model = model
        self.sort_columns = dict(sort_columns)
        self.search_columns = tuple(search_columns)
        self._stmt = base if base is not None else select(model)

    def where(self, *clauses: ColumnElement[bool]) -> "ListQuery":
        self._stmt = self._stmt.where(*clauses)
        return self

    def equals(self, **filters: Any) -> "ListQuery":
        """Equality filters on model columns; ``None`` values are skipped."""
        for name, value in filters.items():
            if value is not None:
                self._stmt = self._stmt.where(getattr(self.model, name) == value)
        return self

    def between(self, column: Any, start: date | datetime | None, end: date | datetime | None) -> "ListQuery":
        if start is not None:
            self._stmt = self._stmt.where(column >= start_of_day(start))
        if end is not None:
            self._stmt = self._stmt.where(column <= end_of_day(end))
        return self

    def search(self, term: str | None) -> "ListQuery":
        if term and self.search_columns:
            self._stmt = self._stmt.where(search_clause(term, self.search_columns))
        return self

    @property
    def statement(self) -> Select:
        return self._stmt

    def count_statement(self) -> Select:
        return select(func.count()).select_from(self._stmt.order_by(None).subquery())

    def page_statement(self, params: PaginationParams) -> Select:
        column = self.sort_columns.get(params.sort)
        if column is None:
            raise KeyError(f"Unsupported sort column: {params.sort}")
        direction = column.desc() if params.order == "desc" else column.asc()
        tie_break = self.model.id.desc() if params.order == "desc" else self.model.id.asc()
        return (
            self._stmt.order_by(direction, tie_break)
            .offset(params.offset)
            .limit(params.limit)
        )

    async def fetch(self, session: AsyncSession, params: PaginationParams) -> tuple[list[Any], int]:
        """Return ``(rows, total)``; a page past the end yields an empty list."""
        self.search(params.search)
        total = (await session.execute(self.count_statement())).scalar_one()
        rows = (await session.execute(self.page_statement(params))).scalars().all()
        return list(rows), total
