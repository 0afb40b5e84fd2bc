"""Management reports: filtered listings with store-computed breakdowns."""

from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.query import end_of_day, start_of_day
from grifo.core.security import Principal
from grifo.domain.inspection import Contest, Inspection
from grifo.domain.mixins import as_utc, utcnow
from grifo.repositories.inspection import ContestRepository, InspectionRepository
from grifo.repositories.property import PropertyRepository

UNASSIGNED = "Não atribuído"
SUMMARY_DAYS = 30

INSPECTION_SORT_COLUMNS = {
    "created_at": Inspection.created_at,
    "scheduled_date": Inspection.scheduled_date,
    "status": Inspection.status,
}

CONTEST_SORT_COLUMNS = {
    "created_at": Contest.created_at,
    "resolved_at": Contest.resolved_at,
    "priority": Contest.priority,
    "status": Contest.status,
}


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 2) if total else 0.0


def _created_between(column, start: date | None, end: date | None) -> list:
    clauses = []
    if start is not None:
        clauses.append(column >= start_of_day(start))
    if end is not None:
        clauses.append(column <= end_of_day(end))
    return clauses


class ReportService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        scope = tenant_scope(principal)
        self._inspections = InspectionRepository(session, scope)
        self._contests = ContestRepository(session, scope)
        self._properties = PropertyRepository(session, scope)

    async def inspections(
        self,
        pagination: PaginationParams,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
        inspector_id: str | None = None,
    ) -> tuple[list[Inspection], int, dict]:
        require(self._principal, "report", "read")
        clauses = _created_between(Inspection.created_at, start_date, end_date)
        if status:
            clauses.append(Inspection.status == status)
        if inspector_id:
            clauses.append(Inspection.inspector_id == inspector_id)

        by_status = await self._inspections.count_by(Inspection.status, *clauses)
        by_inspector = await self._inspections.count_by_inspector(*clauses)
        total = sum(by_status.values())
        statistics = {
            "total": total,
            "by_status": by_status,
            "by_inspector": {(name or UNASSIGNED): n for name, n in by_inspector.items()},
            "completion_rate": _rate(by_status.get("completed", 0), total),
        }

        query = self._inspections.list_query(sort_columns=INSPECTION_SORT_COLUMNS).where(*clauses)
        items, count = await query.fetch(self._session, pagination)
        return items, count, statistics

    async def contests(
        self,
        pagination: PaginationParams,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
    ) -> tuple[list[Contest], int, dict]:
        """Resolution workflow of contests: outcome split, approval rate, time to resolve."""
        require(self._principal, "report", "read")
        clauses = _created_between(Contest.created_at, start_date, end_date)
        if status:
            clauses.append(Contest.status == status)

        by_status = await self._contests.count_by(Contest.status, *clauses)
        by_priority = await self._contests.count_by(Contest.priority, *clauses)
        resolved = await self._contests.resolution_times(*clauses)
        hours = [
            (as_utc(resolved_at) - as_utc(created_at)).total_seconds() / 3600
            for created_at, resolved_at in resolved
        ]
        total = sum(by_status.values())
        statistics = {
            "total": total,
            "by_status": by_status,
            "by_priority": by_priority,
            "approval_rate": _rate(by_status.get("approved", 0), total),
            "avg_resolution_hours": round(sum(hours) / len(hours), 2) if hours else 0.0,
        }

        query = self._contests.list_query(sort_columns=CONTEST_SORT_COLUMNS).where(*clauses)
        items, count = await query.fetch(self._session, pagination)
        return items, count, statistics

    async def summary(self) -> dict:
        """Executive view of the last 30 days."""
        require(self._principal, "report", "read")
        since = utcnow() - timedelta(days=SUMMARY_DAYS)
        inspections = await self._inspections.count_by(Inspection.status, Inspection.created_at >= since)
        contests = await self._contests.count_by(Contest.status, Contest.created_at >= since)
        return {
            "period": f"{SUMMARY_DAYS} days",
            "since": since,
            "metrics": {
                "inspections": {
                    "total": sum(inspections.values()),
                    "pending": inspections.get("pending", 0),
                    "in_progress": inspections.get("in_progress", 0),
                    "completed": inspections.get("completed", 0),
                    "cancelled": inspections.get("cancelled", 0),
                },
                "contests": {
                    "total": sum(contests.values()),
                    "open": contests.get("pending", 0) + contests.get("under_review", 0),
                    "approved": contests.get("approved", 0),
                    "rejected": contests.get("rejected", 0),
                },
                "properties": {"created": await self._properties.created_since(since)},
            },
        }
