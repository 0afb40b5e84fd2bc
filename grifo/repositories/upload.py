"""Upload metadata repository."""

from sqlalchemy import delete

from grifo.domain.upload import Upload
from grifo.repositories.base import BaseRepository


class UploadRepository(BaseRepository[Upload]):
    model = Upload

    async def add_many(self, rows: list[dict]) -> list[Upload]:
        """Insert every metadata row in one flush; all succeed or none do."""
        instances = [Upload(**{"company_id": self._company_id, **row}) for row in rows]
        self._session.add_all(instances)
        await self._session.flush()
        return instances

    async def delete_many(self, ids: list[str]) -> int:
        if not ids:
            return 0
        result = await self._session.execute(
            delete(Upload)
            .where(Upload.id.in_(ids), *self._scope())
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount

    async def latest(self, limit: int) -> list[Upload]:
        q = self._base_query().order_by(Upload.created_at.desc(), Upload.id.desc()).limit(limit)
        return list((await self._session.execute(q)).scalars().all())
