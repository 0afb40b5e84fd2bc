"""Sync operation repository: durable status rows with conditional transitions."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update

from grifo.domain.mixins import utcnow
from grifo.domain.sync import ACTIVE_SYNC_STATUSES, SyncOperation
from grifo.repositories.base import BaseRepository


class SyncRepository(BaseRepository[SyncOperation]):
    model = SyncOperation

    async def transition(self, sync_id: str, from_statuses: Iterable[str], **values: Any) -> bool:
        """Apply ``values`` only if the row is still in one of ``from_statuses``.

        Returns False when another writer moved the row first (e.g. a cancel).
        """
        values.setdefault("updated_at", utcnow())
        result = await self._session.execute(
            update(SyncOperation)
            .where(
                SyncOperation.id == sync_id,
                SyncOperation.status.in_(tuple(from_statuses)),
                *self._scope(),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount > 0

    async def active(self) -> SyncOperation | None:
        q = self._base_query().where(SyncOperation.status.in_(ACTIVE_SYNC_STATUSES))
        return (await self._session.execute(q)).scalars().first()

    async def latest(self, limit: int = 1, *clauses: Any) -> list[SyncOperation]:
        q = (
            self._base_query()
            .where(*clauses)
            .order_by(SyncOperation.created_at.desc(), SyncOperation.id.desc())
            .limit(limit)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def pending_ids(self) -> list[str]:
        q = (
            select(SyncOperation.id)
            .where(SyncOperation.status == "pending", *self._scope())
            .order_by(SyncOperation.created_at)
        )
        return list((await self._session.execute(q)).scalars().all())
