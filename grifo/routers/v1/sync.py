"""Sync operation routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.deps import get_settings, get_sync_worker, get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import IdPath
from grifo.schemas.sync import SyncOperationOut, SyncStatus, SyncTrigger, SyncType
from grifo.services.sync import SORT_COLUMNS, SyncService
from grifo.services.sync_worker import SyncWorker

router = APIRouter(prefix="/sync", tags=["Sync"])

history_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(
    session: AsyncSession,
    principal: Principal,
    worker: SyncWorker,
    settings: Settings,
) -> SyncService:
    return SyncService(session, principal, worker, settings)


@router.get("/status")
async def sync_status(
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    data = await _svc(session, principal, worker, settings).status()
    current = data["current_operation"]
    data["current_operation"] = SyncOperationOut.model_validate(current) if current else None
    data["pending_operations"] = [SyncOperationOut.model_validate(op) for op in data["pending_operations"]]
    return ok(data)


@router.post("/trigger", status_code=status.HTTP_202_ACCEPTED)
async def trigger_sync(
    body: SyncTrigger,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    queued = await _svc(session, principal, worker, settings).trigger(body)
    return ok(queued, "Sincronização iniciada com sucesso")


@router.get("/history")
async def sync_history(
    filter_status: SyncStatus | None = Query(default=None, alias="status"),
    sync_type: SyncType | None = Query(default=None),
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    pagination: PaginationParams = Depends(history_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    items, total = await _svc(session, principal, worker, settings).history(
        pagination, status=filter_status, sync_type=sync_type, from_date=from_date, to_date=to_date,
    )
    return paginated("operations", [SyncOperationOut.model_validate(op) for op in items], total, pagination)


@router.get("/{sync_id}")
async def get_sync_operation(
    sync_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    op = await _svc(session, principal, worker, settings).get_operation(sync_id)
    return ok({"operation": SyncOperationOut.model_validate(op)})


@router.post("/{sync_id}/cancel")
async def cancel_sync(
    sync_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    op = await _svc(session, principal, worker, settings).cancel(sync_id)
    return ok({"operation": SyncOperationOut.model_validate(op)}, "Sincronização cancelada com sucesso")


@router.post("/{sync_id}/retry")
async def retry_sync(
    sync_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    worker: SyncWorker = Depends(get_sync_worker),
    settings: Settings = Depends(get_settings),
):
    op = await _svc(session, principal, worker, settings).retry(sync_id)
    return ok({"operation": SyncOperationOut.model_validate(op)}, "Sincronização reiniciada com sucesso")
