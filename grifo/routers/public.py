"""Unauthenticated public routes (/api/public): contest links sent to tenants and owners."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_optional_principal
from grifo.core.response import ok
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.contest import PublicContestReceipt, PublicContestSubmit, PublicContestView
from grifo.services.contest_link import PublicContestService

router = APIRouter(prefix="/api/public", tags=["Public"])

LinkToken = Annotated[str, Path(min_length=16, max_length=128, pattern=r"^[A-Za-z0-9_-]+$")]


@router.get("/contest/{token}")
async def view_contest_link(
    token: LinkToken,
    session: AsyncSession = Depends(get_db),
):
    view = await PublicContestService(session).view(token)
    return ok(PublicContestView.model_validate(view))


@router.post("/contest/{token}", status_code=status.HTTP_201_CREATED)
async def submit_public_contest(
    token: LinkToken,
    body: PublicContestSubmit,
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(get_db),
):
    contest = await PublicContestService(session).submit(token, body, principal)
    receipt = PublicContestReceipt(contest_id=contest.id, status=contest.status, created_at=contest.created_at)
    return ok(receipt, "Contestação criada com sucesso")
