"""Inspection routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import UUID_PATTERN, IdPath
from grifo.schemas.inspection import (
    InspectionCreate,
    InspectionOut,
    InspectionPriority,
    InspectionStatus,
    InspectionUpdate,
)
from grifo.services.inspection import SORT_COLUMNS, InspectionService

router = APIRouter(prefix="/inspections", tags=["Inspections"])

inspection_pagination = pagination_params(list(SORT_COLUMNS), default_sort="scheduled_date")


def _svc(session: AsyncSession, principal: Principal) -> InspectionService:
    return InspectionService(session, principal)


@router.get("")
async def list_inspections(
    filter_status: InspectionStatus | None = Query(default=None, alias="status"),
    inspector_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    property_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    priority: InspectionPriority | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    pagination: PaginationParams = Depends(inspection_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    """Inspectors only ever see inspections assigned to them."""
    items, total = await _svc(session, principal).list_inspections(
        pagination,
        status=filter_status,
        inspector_id=inspector_id,
        property_id=property_id,
        priority=priority,
        date_from=date_from,
        date_to=date_to,
    )
    return paginated("inspections", [InspectionOut.model_validate(i) for i in items], total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_inspection(
    body: InspectionCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    inspection = await _svc(session, principal).create_inspection(body)
    return ok({"inspection": InspectionOut.model_validate(inspection)}, "Vistoria criada com sucesso")


@router.get("/{inspection_id}")
async def get_inspection(
    inspection_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    inspection = await _svc(session, principal).get_inspection(inspection_id)
    return ok({"inspection": InspectionOut.model_validate(inspection)})


@router.put("/{inspection_id}")
async def update_inspection(
    inspection_id: IdPath,
    body: InspectionUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    inspection = await _svc(session, principal).update_inspection(inspection_id, body)
    return ok({"inspection": InspectionOut.model_validate(inspection)}, "Vistoria atualizada com sucesso")


@router.delete("/{inspection_id}")
async def delete_inspection(
    inspection_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, principal).delete_inspection(inspection_id)
    return ok(message="Vistoria excluída com sucesso")
