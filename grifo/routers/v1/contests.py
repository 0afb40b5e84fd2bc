"""Contest routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.deps import get_settings, get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import UUID_PATTERN, IdPath
from grifo.schemas.contest import (
    ContestCreate,
    ContestLinkCreate,
    ContestLinkOut,
    ContestOut,
    ContestPriority,
    ContestReopen,
    ContestResolve,
    ContestStatus,
    ContestUpdate,
)
from grifo.services.contest import SORT_COLUMNS, ContestService
from grifo.services.contest_link import ContestLinkService, link_url

router = APIRouter(prefix="/contests", tags=["Contests"])

contest_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(session: AsyncSession, principal: Principal) -> ContestService:
    return ContestService(session, principal)


@router.get("")
async def list_contests(
    filter_status: ContestStatus | None = Query(default=None, alias="status"),
    inspection_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    property_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    priority: ContestPriority | None = Query(default=None),
    created_from: date | None = Query(default=None),
    created_to: date | None = Query(default=None),
    pagination: PaginationParams = Depends(contest_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session, principal).list_contests(
        pagination,
        status=filter_status,
        inspection_id=inspection_id,
        property_id=property_id,
        priority=priority,
        created_from=created_from,
        created_to=created_to,
    )
    return paginated("contests", [ContestOut.model_validate(c) for c in items], total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contest(
    body: ContestCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await _svc(session, principal).create_contest(body)
    return ok({"contest": ContestOut.model_validate(contest)}, "Contestação criada com sucesso")


@router.post("/links", status_code=status.HTTP_201_CREATED)
async def create_contest_link(
    body: ContestLinkCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    link = await ContestLinkService(session, principal).create_link(body)
    out = ContestLinkOut.model_validate(link)
    out.url = link_url(settings, link.token)
    return ok({"link": out}, "Link de contestação gerado com sucesso")


@router.get("/{contest_id}")
async def get_contest(
    contest_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await _svc(session, principal).get_contest(contest_id)
    return ok({"contest": ContestOut.model_validate(contest)})


@router.put("/{contest_id}")
async def update_contest(
    contest_id: IdPath,
    body: ContestUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await _svc(session, principal).update_contest(contest_id, body)
    return ok({"contest": ContestOut.model_validate(contest)}, "Contestação atualizada com sucesso")


@router.post("/{contest_id}/resolve")
async def resolve_contest(
    contest_id: IdPath,
    body: ContestResolve,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await _svc(session, principal).resolve_contest(contest_id, body)
    return ok({"contest": ContestOut.model_validate(contest)}, "Contestação resolvida com sucesso")


@router.post("/{contest_id}/reopen")
async def reopen_contest(
    contest_id: IdPath,
    body: ContestReopen,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await _svc(session, principal).reopen_contest(contest_id, body)
    return ok({"contest": ContestOut.model_validate(contest)}, "Contestação reaberta com sucesso")
