"""Portal / mobile user authentication routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.deps import get_current_principal, get_settings
from grifo.core.response import ok
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.auth import ChangePasswordRequest, LoginRequest, TokenOut
from grifo.schemas.user import UserOut
from grifo.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _svc(session: AsyncSession, settings: Settings) -> AuthService:
    return AuthService(session, settings)


@router.post("/login")
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    issued = await _svc(session, settings).login(body)
    return ok(TokenOut.model_validate(issued), "Login realizado com sucesso")


@router.get("/me")
async def me(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await _svc(session, settings).current_user(principal)
    return ok({"user": UserOut.model_validate(user)})


@router.post("/refresh")
async def refresh(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    issued = await _svc(session, settings).refresh(principal)
    return ok(TokenOut.model_validate(issued))


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await _svc(session, settings).change_password(principal, body)
    return ok(message="Senha alterada com sucesso")
