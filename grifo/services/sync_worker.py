"""In-process sync job runner backed by the durable ``sync_operations`` table.

Jobs are identified by operation id and pushed onto an asyncio queue. Each
state change is a conditional UPDATE (``pending -> processing`` and
``processing -> completed|failed``), so an operation cancelled while queued
or running is never overwritten by the worker.
"""

import asyncio
import logging
from datetime import datetime

from sqlalchemy import func, select

from grifo.db.base import Database
from grifo.domain.inspection import Contest, Inspection
from grifo.domain.mixins import as_utc, utcnow
from grifo.domain.property import Property
from grifo.domain.sync import SYNC_ENTITY_TYPES, SyncOperation
from grifo.domain.upload import Upload
from grifo.domain.user import User
from grifo.repositories.sync import SyncRepository

logger = logging.getLogger(__name__)

ENTITY_MODELS = {
    "properties": Property,
    "inspections": Inspection,
    "users": User,
    "contests": Contest,
    "uploads": Upload,
}


class SyncWorker:
    def __init__(self, db: Database):
        self._db = db
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start consuming and re-enqueue operations left pending by a previous process."""
        async with self._db.session() as session:
            pending = await SyncRepository(session).pending_ids()
        for sync_id in pending:
            self.enqueue(sync_id)
        self._task = asyncio.create_task(self._run(), name="sync-worker")
        logger.info("Sync worker started (%d pending operation(s) re-queued)", len(pending))

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sync worker stopped")

    def enqueue(self, sync_id: str) -> None:
        self._queue.put_nowait(sync_id)

    async def drain(self) -> None:
        """Process everything queued, without the background task."""
        while not self._queue.empty():
            sync_id = self._queue.get_nowait()
            try:
                await self.process(sync_id)
            finally:
                self._queue.task_done()

    async def _run(self) -> None:
        while True:
            sync_id = await self._queue.get()
            try:
                await self.process(sync_id)
            except Exception:
                logger.exception("Sync operation %s crashed the worker loop", sync_id)
            finally:
                self._queue.task_done()

    # ------------------------------------------------------------------
    # Job
    # ------------------------------------------------------------------

    async def process(self, sync_id: str) -> str | None:
        """Run one operation; returns its final status, or None if it was not claimable."""
        started = utcnow()
        async with self._db.session() as session:
            repo = SyncRepository(session)
            claimed = await repo.transition(
                sync_id, ("pending",), status="processing", started_at=started,
                completed_at=None, error_message=None,
            )
            if not claimed:
                logger.info("Sync operation %s not pending; skipped", sync_id)
                return None
            op = await repo.get_by_id(sync_id, refresh=True)
            company_id, sync_type, entity_types = op.company_id, op.sync_type, op.entity_types

        logger.info("Sync operation %s processing (%s, company %s)", sync_id, sync_type, company_id)
        try:
            async with self._db.session() as session:
                counts = await self._reconcile(session, company_id, sync_type, entity_types)
        except Exception as exc:
            logger.error("Sync operation %s failed: %s", sync_id, exc)
            return await self._finish(
                sync_id, started, status="failed",
                error_message="Falha ao processar sincronização", items_failed=1,
            )

        return await self._finish(
            sync_id, started, status="completed",
            items_processed=sum(counts.values()),
            result={"sync_type": sync_type, "entities": counts},
        )

    async def _finish(self, sync_id: str, started: datetime, **values) -> str | None:
        finished = utcnow()
        async with self._db.session() as session:
            moved = await SyncRepository(session).transition(
                sync_id, ("processing",),
                completed_at=finished,
                duration_seconds=int((finished - started).total_seconds()),
                **values,
            )
        if not moved:
            logger.info("Sync operation %s was cancelled while processing", sync_id)
            return None
        logger.info("Sync operation %s %s", sync_id, values["status"])
        return values["status"]

    async def _reconcile(
        self, session, company_id: str, sync_type: str, entity_types: list[str] | None,
    ) -> dict[str, int]:
        """Count the tenant's live rows per entity type (changed rows only for incremental)."""
        names = list(entity_types) if sync_type == "entity_specific" and entity_types else list(SYNC_ENTITY_TYPES)
        since = None
        if sync_type == "incremental":
            since = await self._last_completed_at(session, company_id)

        counts: dict[str, int] = {}
        for name in names:
            model = ENTITY_MODELS[name]
            q = select(func.count()).select_from(model).where(model.company_id == company_id)
            if hasattr(model, "deleted_at"):
                q = q.where(model.deleted_at.is_(None))
            if since is not None:
                q = q.where(model.updated_at >= since)
            counts[name] = (await session.execute(q)).scalar_one()
        return counts

    async def _last_completed_at(self, session, company_id: str) -> datetime | None:
        q = (
            select(SyncOperation.completed_at)
            .where(SyncOperation.company_id == company_id, SyncOperation.status == "completed")
            .order_by(SyncOperation.completed_at.desc())
            .limit(1)
        )
        return as_utc((await session.execute(q)).scalar_one_or_none())
