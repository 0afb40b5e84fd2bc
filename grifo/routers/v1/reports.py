"""Management reports (admin and manager only)."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import UUID_PATTERN
from grifo.schemas.contest import ContestOut, ContestStatus
from grifo.schemas.inspection import InspectionOut, InspectionStatus
from grifo.services.report import CONTEST_SORT_COLUMNS, INSPECTION_SORT_COLUMNS, ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])

inspection_pagination = pagination_params(list(INSPECTION_SORT_COLUMNS))
contest_pagination = pagination_params(list(CONTEST_SORT_COLUMNS))


@router.get("/inspections")
async def inspections_report(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    filter_status: InspectionStatus | None = Query(default=None, alias="status"),
    inspector_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    pagination: PaginationParams = Depends(inspection_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total, statistics = await ReportService(session, principal).inspections(
        pagination,
        start_date=start_date,
        end_date=end_date,
        status=filter_status,
        inspector_id=inspector_id,
    )
    body = paginated("inspections", [InspectionOut.model_validate(i) for i in items], total, pagination)
    body["data"]["statistics"] = statistics
    return body


@router.get("/contests")
async def contests_report(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    filter_status: ContestStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(contest_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total, statistics = await ReportService(session, principal).contests(
        pagination, start_date=start_date, end_date=end_date, status=filter_status,
    )
    body = paginated("contests", [ContestOut.model_validate(c) for c in items], total, pagination)
    body["data"]["statistics"] = statistics
    return body


@router.get("/summary")
async def summary_report(
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    return ok(await ReportService(session, principal).summary())
