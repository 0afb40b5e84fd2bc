"""Company (tenant) routes."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import IdPath
from grifo.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from grifo.services.company import SORT_COLUMNS, CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])

company_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(session: AsyncSession, principal: Principal) -> CompanyService:
    return CompanyService(session, principal)


@router.get("")
async def list_companies(
    filter_status: Literal["active", "inactive", "suspended"] | None = Query(default=None, alias="status"),
    plan: Literal["basic", "professional", "enterprise"] | None = Query(default=None),
    pagination: PaginationParams = Depends(company_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session, principal).list_companies(pagination, status=filter_status, plan=plan)
    return paginated("companies", [CompanyOut.model_validate(c) for c in items], total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    body: CompanyCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    company = await _svc(session, principal).create_company(body)
    return ok({"company": CompanyOut.model_validate(company)}, "Empresa criada com sucesso")


@router.get("/{company_id}")
async def get_company(
    company_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    company = await _svc(session, principal).get_company(company_id)
    return ok({"company": CompanyOut.model_validate(company)})


@router.put("/{company_id}")
async def update_company(
    company_id: IdPath,
    body: CompanyUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    company = await _svc(session, principal).update_company(company_id, body)
    return ok({"company": CompanyOut.model_validate(company)}, "Empresa atualizada com sucesso")


@router.get("/{company_id}/stats")
async def company_stats(
    company_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    return ok(await _svc(session, principal).stats(company_id))
