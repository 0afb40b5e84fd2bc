"""Inspection and contest repositories."""

from sqlalchemy import func, select, update

from grifo.domain.inspection import Contest, ContestLink, Inspection
from grifo.domain.mixins import utcnow
from grifo.domain.property import Property
from grifo.domain.user import User
from grifo.repositories.base import BaseRepository


class InspectionRepository(BaseRepository[Inspection]):
    model = Inspection

    def with_property(self):
        """Base SELECT joined to properties so search can reach address columns."""
        return select(Inspection).join(Property, Inspection.property_id == Property.id)

    async def has_contests(self, inspection_id: str) -> bool:
        q = select(func.count()).select_from(Contest).where(
            Contest.inspection_id == inspection_id, Contest.deleted_at.is_(None)
        )
        return (await self._session.execute(q)).scalar_one() > 0

    async def latest(self, limit: int) -> list[Inspection]:
        q = self._base_query().order_by(Inspection.created_at.desc(), Inspection.id.desc()).limit(limit)
        return list((await self._session.execute(q)).scalars().all())

    async def count_by_inspector(self, *clauses) -> dict[str | None, int]:
        q = (
            select(User.name, func.count(Inspection.id))
            .select_from(Inspection)
            .outerjoin(User, Inspection.inspector_id == User.id)
            .where(*self._scope(), *clauses)
            .group_by(User.name)
        )
        return {name: total for name, total in (await self._session.execute(q)).all()}


class ContestRepository(BaseRepository[Contest]):
    model = Contest

    def with_inspection(self):
        return select(Contest).join(Inspection, Contest.inspection_id == Inspection.id)

    async def latest(self, limit: int) -> list[Contest]:
        q = self._base_query().order_by(Contest.created_at.desc(), Contest.id.desc()).limit(limit)
        return list((await self._session.execute(q)).scalars().all())

    async def resolution_times(self, *clauses) -> list[tuple]:
        """``(created_at, resolved_at)`` of resolved contests matching ``clauses``."""
        q = select(Contest.created_at, Contest.resolved_at).where(
            *self._scope(), Contest.resolved_at.is_not(None), *clauses
        )
        return list((await self._session.execute(q)).all())


class ContestLinkRepository(BaseRepository[ContestLink]):
    model = ContestLink

    async def get_by_token(self, token: str) -> ContestLink | None:
        result = await self._session.execute(self._base_query().where(ContestLink.token == token))
        return result.scalars().first()

    async def claim(self, link_id: str, **contestant) -> bool:
        """Mark an unused link as used; False when another request got there first."""
        result = await self._session.execute(
            update(ContestLink)
            .where(ContestLink.id == link_id, ContestLink.is_used.is_(False), *self._scope())
            .values(is_used=True, used_at=utcnow(), updated_at=utcnow(), **contestant)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount == 1
