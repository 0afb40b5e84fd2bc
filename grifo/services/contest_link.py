"""Public contest links: staff issue a single-use token, anyone holding it may contest once."""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import ConflictError, NotFoundError, ValidationError
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal, new_session_token
from grifo.domain.inspection import Contest, ContestLink, Inspection
from grifo.domain.mixins import as_utc, utcnow
from grifo.repositories.base import unique_guard
from grifo.repositories.company import CompanyRepository
from grifo.repositories.inspection import ContestLinkRepository, ContestRepository, InspectionRepository
from grifo.schemas.contest import ContestLinkCreate, PublicContestSubmit
from grifo.services.contest import CONTESTABLE_STATUSES, OPEN_CONTEST_EXISTS

logger = logging.getLogger(__name__)

INVALID_LINK = "Token inválido, expirado ou já utilizado"
LINK_ALREADY_USED = "Este link de contestação já foi utilizado"
NOT_CONTESTABLE = "Apenas vistorias em andamento ou concluídas podem ser contestadas"


def link_url(settings: Settings, token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/contest/{token}"


class ContestLinkService:
    """Staff side: issue links for inspections of the caller's tenant."""

    def __init__(self, session: AsyncSession, principal: Principal):
        self._principal = principal
        scope = tenant_scope(principal)
        self._links = ContestLinkRepository(session, scope)
        self._inspections = InspectionRepository(session, scope)

    async def create_link(self, data: ContestLinkCreate) -> ContestLink:
        require(self._principal, "contest", "create_link")
        inspection = await self._inspections.get_by_id(data.inspection_id)
        if inspection is None:
            raise NotFoundError("Vistoria")
        if inspection.status not in CONTESTABLE_STATUSES:
            raise ValidationError(NOT_CONTESTABLE)

        link = await self._links.create(
            inspection_id=inspection.id,
            company_id=inspection.company_id,
            token=new_session_token(),
            expires_at=utcnow() + timedelta(days=data.expires_in_days),
            created_by=self._principal.id,
            updated_by=self._principal.id,
        )
        logger.info(
            "Contest link %s issued for inspection %s by %s (expires %s)",
            link.id, inspection.id, self._principal.id, link.expires_at,
        )
        return link


class PublicContestService:
    """Anonymous side: look a link up by token and turn it into one contest."""

    def __init__(self, session: AsyncSession):
        self._links = ContestLinkRepository(session)
        self._contests = ContestRepository(session)
        self._companies = CompanyRepository(session)

    async def _usable_link(self, token: str) -> ContestLink:
        link = await self._links.get_by_token(token)
        if link is None or as_utc(link.expires_at) <= utcnow():
            logger.info("Rejected contest link %s...", token[:8])
            raise ValidationError(INVALID_LINK)
        return link

    async def view(self, token: str) -> dict:
        link = await self._usable_link(token)
        if link.is_used:
            raise ValidationError(INVALID_LINK)
        company = await self._companies.get_by_id(link.company_id)
        if company is None:
            raise NotFoundError("Empresa")
        return {
            "contest_link_id": link.id,
            "expires_at": link.expires_at,
            "inspection": link.inspection,
            "company": company,
        }

    def _submitted_by(self, principal: Principal | None, link: ContestLink) -> str | None:
        """Staff of the link's tenant may file on a contestant's behalf."""
        if principal is None:
            return None
        if principal.is_super_admin or principal.company_id == link.company_id:
            return principal.id
        return None

    async def submit(
        self, token: str, data: PublicContestSubmit, principal: Principal | None = None,
    ) -> Contest:
        link = await self._usable_link(token)
        if link.is_used:
            raise ConflictError(LINK_ALREADY_USED)
        inspection: Inspection = link.inspection
        if inspection is None or inspection.deleted_at is not None:
            raise NotFoundError("Vistoria")
        if inspection.status not in CONTESTABLE_STATUSES:
            raise ValidationError(NOT_CONTESTABLE)

        claimed = await self._links.claim(
            link.id,
            contestant_name=data.contestant_name,
            contestant_email=data.contestant_email,
        )
        if not claimed:
            raise ConflictError(LINK_ALREADY_USED)

        submitted_by = self._submitted_by(principal, link)
        with unique_guard(OPEN_CONTEST_EXISTS):
            contest = await self._contests.create(
                **data.model_dump(),
                inspection_id=inspection.id,
                company_id=link.company_id,
                status="pending",
                created_via="public_link",
                created_by=submitted_by,
                updated_by=submitted_by,
            )
        await self._links.update(link.id, contest_id=contest.id)
        logger.info(
            "Public contest %s created on inspection %s via link %s (token %s...)",
            contest.id, inspection.id, link.id, token[:8],
        )
        return contest
