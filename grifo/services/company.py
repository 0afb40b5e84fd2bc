"""Company (tenant) management."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import NotFoundError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal
from grifo.domain.company import Company
from grifo.domain.inspection import Inspection
from grifo.domain.property import Property
from grifo.domain.user import User
from grifo.repositories.base import unique_guard
from grifo.repositories.company import CompanyRepository
from grifo.repositories.inspection import InspectionRepository
from grifo.repositories.property import PropertyRepository
from grifo.repositories.user import UserRepository
from grifo.schemas.company import CompanyCreate, CompanyUpdate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Company.created_at,
    "name": Company.name,
    "plan": Company.plan,
    "status": Company.status,
}


class CompanyService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        self._repo = CompanyRepository(session, tenant_scope(principal))

    async def list_companies(self, pagination: PaginationParams, status: str | None = None, plan: str | None = None):
        query = self._repo.list_query(
            sort_columns=SORT_COLUMNS,
            search_columns=(Company.name, Company.email, Company.cnpj),
        ).equals(status=status, plan=plan)
        return await query.fetch(self._session, pagination)

    async def get_company(self, company_id: str) -> Company:
        company = await self._repo.get_by_id(company_id)
        if company is None:
            raise NotFoundError("Empresa")
        require(self._principal, "company", "read", company)
        return company

    async def create_company(self, data: CompanyCreate) -> Company:
        require(self._principal, "company", "create")
        with unique_guard("CNPJ ou email já cadastrado"):
            company = await self._repo.create(**data.model_dump(exclude_unset=True), status="active")
        logger.info("Company %s created by %s", company.id, self._principal.id)
        return company

    async def update_company(self, company_id: str, data: CompanyUpdate) -> Company:
        company = await self.get_company(company_id)
        require(self._principal, "company", "update", company)
        changes = data.changes()
        if "plan" in changes or "status" in changes:
            require(self._principal, "company", "change_plan", company)
        if not changes:
            return company
        with unique_guard("CNPJ ou email já cadastrado"):
            return await self._repo.update(company.id, **changes)

    async def stats(self, company_id: str) -> dict:
        company = await self.get_company(company_id)
        users = UserRepository(self._session, company.id)
        properties = PropertyRepository(self._session, company.id)
        inspections = InspectionRepository(self._session, company.id)

        users_by_role = await users.count_by(User.role)
        users_by_status = await users.count_by(User.status)
        properties_by_status = await properties.count_by(Property.status)
        inspections_by_status = await inspections.count_by(Inspection.status)
        return {
            "company_id": company.id,
            "users": {
                "total": sum(users_by_role.values()),
                "by_role": users_by_role,
                "by_status": users_by_status,
            },
            "properties": {
                "total": sum(properties_by_status.values()),
                "by_status": properties_by_status,
            },
            "inspections": {
                "total": sum(inspections_by_status.values()),
                "by_status": inspections_by_status,
            },
        }
