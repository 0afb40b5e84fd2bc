"""Dashboard routes."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.response import ok
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats")
async def dashboard_stats(
    period: Literal["7d", "30d", "90d", "1y"] = Query(default="30d"),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    return ok(await DashboardService(session, principal).stats(period))


@router.get("/recent-activity")
async def recent_activity(
    limit: int = Query(default=10, ge=1, le=50),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    activities = await DashboardService(session, principal).recent_activity(limit)
    return ok({"activities": activities, "total": len(activities)})
