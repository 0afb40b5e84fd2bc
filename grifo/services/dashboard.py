"""Dashboard aggregates. All counting is done by the store with GROUP BY."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.permissions import authorize, tenant_scope
from grifo.core.security import Principal
from grifo.domain.inspection import Contest, Inspection
from grifo.domain.mixins import as_utc, utcnow
from grifo.domain.property import Property
from grifo.domain.user import User
from grifo.repositories.inspection import ContestRepository, InspectionRepository
from grifo.repositories.property import PropertyRepository
from grifo.repositories.upload import UploadRepository
from grifo.repositories.user import UserRepository

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
MAX_ACTIVITY = 20


def _sum(counts: dict[str, int], *keys: str) -> int:
    return sum(counts.get(k, 0) for k in keys)


class DashboardService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._principal = principal
        scope = tenant_scope(principal)
        self._properties = PropertyRepository(session, scope)
        self._inspections = InspectionRepository(session, scope)
        self._contests = ContestRepository(session, scope)
        self._uploads = UploadRepository(session, scope)
        self._users = UserRepository(session, scope)

    async def stats(self, period: str = "30d") -> dict:
        now = utcnow()
        since = now - timedelta(days=PERIOD_DAYS.get(period, 30))
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        properties_by_status = await self._properties.count_by(Property.status)
        inspections_by_status = await self._inspections.count_by(Inspection.status)
        contests_by_status = await self._contests.count_by(Contest.status)

        data = {
            "period": {"key": period, "start": since, "end": now},
            "properties": {
                "total": sum(properties_by_status.values()),
                "active": properties_by_status.get("active", 0),
                "by_status": properties_by_status,
                "new_in_period": await self._properties.created_since(since),
            },
            "inspections": {
                "total": sum(inspections_by_status.values()),
                "by_status": inspections_by_status,
                "this_month": await self._inspections.created_since(month_start),
                "in_period": await self._inspections.created_since(since),
                "completed_in_period": await self._inspections.count(
                    Inspection.status == "completed", Inspection.completed_date >= since,
                ),
            },
            "contests": {
                "total": sum(contests_by_status.values()),
                "open": _sum(contests_by_status, "pending", "under_review"),
                "resolved": _sum(contests_by_status, "approved", "rejected"),
                "by_status": contests_by_status,
                "in_period": await self._contests.created_since(since),
            },
        }

        if authorize(self._principal, "dashboard", "users_stats"):
            users_by_role = await self._users.count_by(User.role)
            data["users"] = {
                "total": sum(users_by_role.values()),
                "active": await self._users.count(User.status == "active"),
                "by_role": users_by_role,
            }
        return data

    async def recent_activity(self, limit: int = 10) -> list[dict]:
        limit = max(1, min(limit, MAX_ACTIVITY))
        activity: list[dict] = []

        for inspection in await self._inspections.latest(limit):
            activity.append({
                "type": "inspection",
                "id": inspection.id,
                "title": f"Vistoria {inspection.inspection_type}",
                "description": inspection.property.address if inspection.property else None,
                "status": inspection.status,
                "created_at": as_utc(inspection.created_at),
            })
        for contest in await self._contests.latest(limit):
            activity.append({
                "type": "contest",
                "id": contest.id,
                "title": f"Contestação de {contest.contestant_name}",
                "description": contest.contest_type,
                "status": contest.status,
                "created_at": as_utc(contest.created_at),
            })
        for upload in await self._uploads.latest(limit):
            activity.append({
                "type": "upload",
                "id": upload.id,
                "title": upload.original_name,
                "description": upload.upload_type,
                "status": None,
                "created_at": as_utc(upload.created_at),
            })

        activity.sort(key=lambda item: (item["created_at"], item["id"]), reverse=True)
        return activity[:limit]
