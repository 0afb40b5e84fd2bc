"""Property repository, including the per-property inspection aggregates."""

from collections.abc import Iterable

from sqlalchemy import func, select

from grifo.domain.inspection import INSPECTION_STATUSES, Inspection
from grifo.domain.property import Property
from grifo.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    model = Property

    def _live_inspections(self, property_ids: list[str]):
        return (
            Inspection.property_id.in_(property_ids),
            Inspection.deleted_at.is_(None),
        )

    async def inspection_counts(self, property_ids: Iterable[str]) -> dict[str, dict[str, int]]:
        """``{property_id: {total, pending, in_progress, completed, cancelled}}``."""
        ids = list(property_ids)
        counts = {pid: {"total": 0, **{s: 0 for s in INSPECTION_STATUSES}} for pid in ids}
        if not ids:
            return counts
        q = (
            select(Inspection.property_id, Inspection.status, func.count())
            .where(*self._live_inspections(ids))
            .group_by(Inspection.property_id, Inspection.status)
        )
        for property_id, status, total in (await self._session.execute(q)).all():
            counts[property_id][status] = total
            counts[property_id]["total"] += total
        return counts

    async def last_inspections(self, property_ids: Iterable[str]) -> dict[str, Inspection]:
        """Most recently scheduled inspection per property."""
        ids = list(property_ids)
        if not ids:
            return {}
        latest = (
            select(Inspection.property_id, func.max(Inspection.scheduled_date).label("latest"))
            .where(*self._live_inspections(ids))
            .group_by(Inspection.property_id)
            .subquery()
        )
        q = (
            select(Inspection)
            .join(
                latest,
                (Inspection.property_id == latest.c.property_id)
                & (Inspection.scheduled_date == latest.c.latest),
            )
            .where(Inspection.deleted_at.is_(None))
            .order_by(Inspection.id)
        )
        found: dict[str, Inspection] = {}
        for row in (await self._session.execute(q)).scalars().all():
            found.setdefault(row.property_id, row)
        return found

    async def inspections_for(self, property_id: str) -> list[Inspection]:
        q = (
            select(Inspection)
            .where(Inspection.property_id == property_id, Inspection.deleted_at.is_(None))
            .order_by(Inspection.scheduled_date.desc(), Inspection.id.desc())
        )
        return list((await self._session.execute(q)).scalars().all())

    async def has_inspections(self, property_id: str) -> bool:
        q = select(func.count()).select_from(Inspection).where(
            Inspection.property_id == property_id, Inspection.deleted_at.is_(None)
        )
        return (await self._session.execute(q)).scalar_one() > 0
