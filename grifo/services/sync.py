"""Sync operations: trigger, status, history, cancel and retry."""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal
from grifo.domain.mixins import utcnow
from grifo.domain.sync import ACTIVE_SYNC_STATUSES, SyncOperation
from grifo.repositories.base import unique_guard
from grifo.repositories.sync import SyncRepository
from grifo.schemas.sync import SyncTrigger
from grifo.services.sync_worker import SyncWorker

logger = logging.getLogger(__name__)

SYNC_IN_PROGRESS = "Já existe uma sincronização em andamento"
STATUS_WINDOW = 100

SORT_COLUMNS = {
    "created_at": SyncOperation.created_at,
    "completed_at": SyncOperation.completed_at,
    "status": SyncOperation.status,
}


def estimated_duration(sync_type: str, entity_types: list[str] | None) -> int:
    """Seconds the UI should expect the operation to take."""
    if sync_type == "full":
        return 300
    if sync_type == "incremental":
        return 120
    if sync_type == "entity_specific" and entity_types:
        return 30 * len(entity_types)
    return 60


class SyncService:
    def __init__(
        self,
        session: AsyncSession,
        principal: Principal,
        worker: SyncWorker,
        settings: Settings,
    ):
        self._session = session
        self._principal = principal
        self._worker = worker
        self._settings = settings
        self._repo = SyncRepository(session, tenant_scope(principal))

    async def _get(self, sync_id: str) -> SyncOperation:
        op = await self._repo.get_by_id(sync_id)
        if op is None:
            raise NotFoundError("Operação de sincronização")
        return op

    async def trigger(self, data: SyncTrigger) -> dict:
        require(self._principal, "sync", "trigger")
        repo = SyncRepository(self._session, self._principal.company_id)

        if data.force:
            active = await repo.active()
            if active is not None:
                await repo.transition(
                    active.id, ACTIVE_SYNC_STATUSES,
                    status="cancelled", completed_at=utcnow(),
                    error_message="Cancelada por sincronização forçada",
                )
                logger.info("Sync %s cancelled by forced trigger from %s", active.id, self._principal.id)

        with unique_guard(SYNC_IN_PROGRESS):
            op = await repo.create(
                sync_type=data.sync_type,
                entity_types=data.entity_types,
                status="pending",
                initiated_by=self._principal.id,
            )
        # The worker reads the row from its own session.
        await self._session.commit()
        self._worker.enqueue(op.id)

        logger.info(
            "Sync %s (%s) queued for company %s by %s",
            op.id, op.sync_type, op.company_id, self._principal.id,
        )
        return {
            "sync_id": op.id,
            "status": op.status,
            "estimated_duration": estimated_duration(data.sync_type, data.entity_types),
        }

    async def status(self) -> dict:
        recent = await self._repo.latest(STATUS_WINDOW)
        pending = [op for op in recent if op.status == "pending"]
        completed = [op for op in recent if op.status == "completed"]
        failed = [op for op in recent if op.status == "failed"]
        last_sync = next((op for op in recent if op.status == "completed"), None)
        current = next((op for op in recent if op.status == "processing"), None)

        if current is not None:
            sync_status = "syncing"
        elif failed and last_sync is None:
            sync_status = "error"
        else:
            sync_status = "idle"

        return {
            "last_sync": last_sync.completed_at if last_sync else None,
            "sync_status": sync_status,
            "current_operation": current,
            "pending_items": len(pending),
            "pending_operations": pending[:10],
            "sync_stats": {
                "total_synced": len(completed),
                "failed_syncs": len(failed),
                "success_rate": round(len(completed) / len(recent) * 100, 2) if recent else 0,
            },
        }

    async def history(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        sync_type: str | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ):
        query = (
            self._repo.list_query(sort_columns=SORT_COLUMNS)
            .equals(status=status, sync_type=sync_type)
            .between(SyncOperation.created_at, from_date, to_date)
        )
        return await query.fetch(self._session, pagination)

    async def get_operation(self, sync_id: str) -> SyncOperation:
        return await self._get(sync_id)

    async def cancel(self, sync_id: str) -> SyncOperation:
        require(self._principal, "sync", "cancel")
        op = await self._get(sync_id)
        moved = await self._repo.transition(
            op.id, ACTIVE_SYNC_STATUSES,
            status="cancelled", completed_at=utcnow(),
            error_message=f"Cancelada por {self._principal.id}",
        )
        if not moved:
            raise ValidationError("Apenas sincronizações pendentes ou em processamento podem ser canceladas")
        logger.info("Sync %s cancelled by %s", op.id, self._principal.id)
        return await self._repo.get_by_id(op.id, refresh=True)

    async def retry(self, sync_id: str) -> SyncOperation:
        require(self._principal, "sync", "retry")
        op = await self._get(sync_id)
        if op.status != "failed":
            raise ValidationError("Apenas sincronizações que falharam podem ser tentadas novamente")
        limit = self._settings.sync_max_retries
        if op.retry_count >= limit:
            raise ValidationError(f"Limite de tentativas excedido ({limit})")

        with unique_guard(SYNC_IN_PROGRESS):
            moved = await self._repo.transition(
                op.id, ("failed",),
                status="pending",
                retry_count=op.retry_count + 1,
                retried_by=self._principal.id,
                started_at=None,
                completed_at=None,
                error_message=None,
            )
        if not moved:
            raise ValidationError("Apenas sincronizações que falharam podem ser tentadas novamente")
        await self._session.commit()
        self._worker.enqueue(op.id)
        logger.info("Sync %s retried by %s (attempt %d)", op.id, self._principal.id, op.retry_count + 1)
        return await self._repo.get_by_id(op.id, refresh=True)
