"""Contests raised against inspection results."""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, sees_only_own_inspections, tenant_scope
from grifo.core.security import Principal
from grifo.domain.inspection import OPEN_CONTEST_STATUSES, Contest, Inspection
from grifo.domain.mixins import utcnow
from grifo.repositories.base import unique_guard
from grifo.repositories.inspection import ContestRepository, InspectionRepository
from grifo.schemas.contest import ContestCreate, ContestReopen, ContestResolve, ContestUpdate

logger = logging.getLogger(__name__)

OPEN_CONTEST_EXISTS = "Já existe uma contestação aberta para esta vistoria"
CONTESTABLE_STATUSES = ("in_progress", "completed")
RESOLVED_STATUSES = ("approved", "rejected")

SORT_COLUMNS = {
    "created_at": Contest.created_at,
    "priority": Contest.priority,
    "status": Contest.status,
    "resolved_at": Contest.resolved_at,
}

SEARCH_COLUMNS = (Contest.contestant_name, Contest.contestant_email, Contest.description)


class ContestService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        scope = tenant_scope(principal)
        self._repo = ContestRepository(session, scope)
        self._inspections = InspectionRepository(session, scope)

    def _visible(self, contest: Contest) -> bool:
        if not sees_only_own_inspections(self._principal):
            return True
        return contest.inspection is not None and contest.inspection.inspector_id == self._principal.id

    async def list_contests(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        inspection_id: str | None = None,
        property_id: str | None = None,
        priority: str | None = None,
        created_from: date | None = None,
        created_to: date | None = None,
    ):
        query = (
            self._repo.list_query(
                sort_columns=SORT_COLUMNS,
                search_columns=SEARCH_COLUMNS,
                base=self._repo.with_inspection(),
            )
            .equals(status=status, inspection_id=inspection_id, priority=priority)
            .between(Contest.created_at, created_from, created_to)
        )
        if property_id:
            query.where(Inspection.property_id == property_id)
        if sees_only_own_inspections(self._principal):
            query.where(Inspection.inspector_id == self._principal.id)
        return await query.fetch(self._session, pagination)

    async def get_contest(self, contest_id: str) -> Contest:
        contest = await self._repo.get_by_id(contest_id)
        if contest is None or not self._visible(contest):
            raise NotFoundError("Contestação")
        return contest

    async def create_contest(self, data: ContestCreate) -> Contest:
        require(self._principal, "contest", "create")
        inspection = await self._inspections.get_by_id(data.inspection_id)
        if inspection is None:
            raise NotFoundError("Vistoria")
        if inspection.status not in CONTESTABLE_STATUSES:
            raise ValidationError("Apenas vistorias em andamento ou concluídas podem ser contestadas")

        with unique_guard(OPEN_CONTEST_EXISTS):
            contest = await self._repo.create(
                **data.model_dump(exclude_unset=True),
                company_id=inspection.company_id,
                status="pending",
                created_by=self._principal.id,
                updated_by=self._principal.id,
            )
        logger.info("Contest %s opened on inspection %s", contest.id, inspection.id)
        return contest

    async def update_contest(self, contest_id: str, data: ContestUpdate) -> Contest:
        contest = await self.get_contest(contest_id)
        require(self._principal, "contest", "update", contest)
        if contest.status not in OPEN_CONTEST_STATUSES:
            raise ValidationError("Apenas contestações abertas podem ser alteradas")
        changes = data.changes()
        if not changes:
            return contest
        return await self._repo.update(contest.id, **changes, updated_by=self._principal.id)

    async def resolve_contest(self, contest_id: str, data: ContestResolve) -> Contest:
        contest = await self.get_contest(contest_id)
        require(self._principal, "contest", "resolve", contest)
        if contest.status not in OPEN_CONTEST_STATUSES:
            raise ValidationError("Contestação já foi resolvida")
        resolved = await self._repo.update(
            contest.id,
            status=data.status,
            resolution_notes=data.resolution_notes,
            resolved_at=utcnow(),
            resolved_by=self._principal.id,
            updated_by=self._principal.id,
        )
        logger.info("Contest %s resolved as %s by %s", contest.id, data.status, self._principal.id)
        return resolved

    async def reopen_contest(self, contest_id: str, data: ContestReopen) -> Contest:
        contest = await self.get_contest(contest_id)
        require(self._principal, "contest", "reopen", contest)
        if contest.status not in RESOLVED_STATUSES:
            raise ValidationError("Apenas contestações resolvidas podem ser reabertas")
        with unique_guard(OPEN_CONTEST_EXISTS):
            reopened = await self._repo.update(
                contest.id,
                status="under_review",
                reopen_reason=data.reason,
                resolved_at=None,
                resolved_by=None,
                updated_by=self._principal.id,
            )
        logger.info("Contest %s reopened by %s", contest.id, self._principal.id)
        return reopened
