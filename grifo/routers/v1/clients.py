"""Client-portal routes: self-service (session token) and administration (JWT)."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.deps import ClientAuth, get_current_client, get_settings, get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.client import (
    ClientLogin,
    ClientOut,
    ClientProfileUpdate,
    ClientRegister,
    ClientSessionOut,
    ClientStatusUpdate,
)
from grifo.schemas.common import IdPath
from grifo.services.client import SORT_COLUMNS, ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])

client_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(session: AsyncSession, settings: Settings | None = None) -> ClientService:
    return ClientService(session, settings)


# ------------------------------------------------------------------
# Self-service
# ------------------------------------------------------------------

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: ClientRegister, session: AsyncSession = Depends(get_db)):
    client = await _svc(session).register(body)
    return ok({"client": ClientOut.model_validate(client)}, "Cliente registrado com sucesso")


@router.post("/login")
async def login(
    body: ClientLogin,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    opened = await _svc(session, settings).login(body)
    return ok(ClientSessionOut.model_validate(opened), "Login realizado com sucesso")


@router.post("/logout")
async def logout(auth: ClientAuth = Depends(get_current_client), session: AsyncSession = Depends(get_db)):
    await _svc(session).logout(auth.token)
    return ok(message="Logout realizado com sucesso")


@router.get("/profile")
async def get_profile(auth: ClientAuth = Depends(get_current_client)):
    return ok({"client": ClientOut.model_validate(auth.client)})


@router.put("/profile")
async def update_profile(
    body: ClientProfileUpdate,
    auth: ClientAuth = Depends(get_current_client),
    session: AsyncSession = Depends(get_db),
):
    client = await _svc(session).update_profile(auth.client, body)
    return ok({"client": ClientOut.model_validate(client)}, "Perfil atualizado com sucesso")


# ------------------------------------------------------------------
# Administration
# ------------------------------------------------------------------

@router.get("")
async def list_clients(
    filter_status: Literal["active", "inactive", "suspended"] | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(client_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_clients(principal, pagination, status=filter_status)
    return paginated("clients", [ClientOut.model_validate(c) for c in items], total, pagination)


@router.get("/{client_id}")
async def get_client(
    client_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    client = await _svc(session).get_client(principal, client_id)
    return ok({"client": ClientOut.model_validate(client)})


@router.patch("/{client_id}/status")
async def update_client_status(
    client_id: IdPath,
    body: ClientStatusUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    client = await _svc(session).set_status(principal, client_id, body.status)
    return ok({"client": ClientOut.model_validate(client)}, "Status do cliente atualizado")


@router.delete("/{client_id}")
async def delete_client(
    client_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_client(principal, client_id)
    return ok(message="Cliente excluído com sucesso")
