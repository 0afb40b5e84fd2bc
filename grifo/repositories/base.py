"""Generic async repository with soft-delete, tenant scoping and list queries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import ValidationError
from grifo.core.query import ListQuery
from grifo.db.base import Base
from grifo.domain.mixins import utcnow

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


UNIQUE_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for unique-index violations on SQLite and PostgreSQL only."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_SQLSTATE or getattr(orig, "pgcode", None) == UNIQUE_SQLSTATE:
        return True
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def unique_guard(message: str) -> Iterator[None]:
    """Turn a unique-index violation raised inside the block into a 400.

    Other integrity errors (NOT NULL, foreign keys) propagate unchanged.
    """
    try:
        yield
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        logger.info("Unique constraint rejected write: %s", exc.orig)
        raise ValidationError(message) from exc


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. Queries are filtered by company_id.

    ``company_id=None`` means unscoped (super_admin, login lookups, the sync
    worker). Rows with ``deleted_at IS NOT NULL`` are excluded from all reads.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, company_id: str | None = None):
        self._session = session
        self._company_id = company_id

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _scope(self) -> list[Any]:
        """WHERE clauses every read and write of this repository carries."""
        clauses: list[Any] = []
        if self._company_id is not None and hasattr(self.model, "company_id"):
            clauses.append(self.model.company_id == self._company_id)
        if hasattr(self.model, "deleted_at"):
            clauses.append(self.model.deleted_at.is_(None))
        return clauses

    def _base_query(self):
        return select(self.model).where(*self._scope())

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str, *, refresh: bool = False) -> ModelT | None:
        q = self._base_query().where(self.model.id == entity_id)
        if refresh:
            q = q.execution_options(populate_existing=True)
        result = await self._session.execute(q)
        return result.scalars().first()

    async def get_many(self, ids: Iterable[str]) -> list[ModelT]:
        ids = list(ids)
        if not ids:
            return []
        result = await self._session.execute(self._base_query().where(self.model.id.in_(ids)))
        return list(result.scalars().all())

    def list_query(
        self,
        *,
        sort_columns: Mapping[str, Any],
        search_columns: Iterable[Any] = (),
        base=None,
    ) -> ListQuery:
        """A ListQuery already restricted to this repository's scope."""
        stmt = base if base is not None else select(self.model)
        return ListQuery(
            self.model,
            sort_columns=sort_columns,
            search_columns=search_columns,
            base=stmt.where(*self._scope()),
        )

    async def count(self, *clauses: Any) -> int:
        q = select(func.count()).select_from(self.model).where(*self._scope(), *clauses)
        return (await self._session.execute(q)).scalar_one()

    async def count_by(self, column: Any, *clauses: Any) -> dict[str, int]:
        """``{value: count}`` grouped by ``column``; computed by the store."""
        q = (
            select(column, func.count())
            .select_from(self.model)
            .where(*self._scope(), *clauses)
            .group_by(column)
        )
        rows = (await self._session.execute(q)).all()
        return {value: total for value, total in rows}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        if (
            self._company_id is not None
            and hasattr(self.model, "company_id")
            and "company_id" not in kwargs
        ):
            kwargs["company_id"] = self._company_id
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id, surface constraint violations
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("company_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = utcnow()

        await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id, *self._scope())
            .values(**kwargs)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return await self.get_by_id(entity_id, refresh=True)

    async def soft_delete(self, entity_id: str, *, deleted_by: str | None = None) -> bool:
        values: dict[str, Any] = {"deleted_at": utcnow()}
        if deleted_by and hasattr(self.model, "updated_by"):
            values["updated_by"] = deleted_by
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id, *self._scope())
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount > 0

    async def hard_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            delete(self.model)
            .where(self.model.id == entity_id, *self._scope())
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount > 0

    async def created_since(self, since: datetime, *clauses: Any) -> int:
        return await self.count(self.model.created_at >= since, *clauses)
