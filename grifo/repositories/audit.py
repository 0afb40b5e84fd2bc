"""Audit trail repository (append-only)."""

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.domain.audit import AuditTrail


class AuditRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(self, **fields) -> AuditTrail:
        row = AuditTrail(**fields)
        self._session.add(row)
        await self._session.flush()
        return row
