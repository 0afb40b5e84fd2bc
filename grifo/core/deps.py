"""FastAPI dependencies: settings, principals, client sessions, app-owned services.

Everything here reads from ``request.app.state``; nothing is a module-level
singleton, so tests build an app with their own database and storage.
"""


import logging
from dataclasses import dataclass

from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import AuthenticationError, ForbiddenError
from grifo.core.security import Principal, bearer_token, decode_access_token
from grifo.db.base import get_db
from grifo.domain.client import Client
from grifo.domain.mixins import as_utc, utcnow
from grifo.repositories.client import ClientRepository, ClientSessionRepository
from grifo.repositories.company import CompanyRepository

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request):
    return request.app.state.storage


def get_sync_worker(request: Request):
    return request.app.state.sync_worker


# ---------------------------------------------------------------------------
# Signed-token principals (portal / mobile users)
# ---------------------------------------------------------------------------

async def get_current_principal(
    request: Request,
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    token = bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Token de acesso requerido")
    principal = decode_access_token(settings, token)
    request.state.principal = principal
    return principal


async def get_optional_principal(
    request: Request,
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal | None:
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        principal = decode_access_token(settings, token)
    except AuthenticationError:
        return None
    request.state.principal = principal
    return principal


async def get_tenant_principal(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
) -> Principal:
    """A user principal whose company is active; suspended tenants get 403."""
    if principal.is_super_admin:
        return principal
    company = await CompanyRepository(session).get_by_id(principal.company_id)
    if company is None or company.status != "active":
        logger.info(
            "Request from user %s rejected: company %s is not active",
            principal.id, principal.company_id,
        )
        raise ForbiddenError("Empresa suspensa ou inativa")
    return principal


# ---------------------------------------------------------------------------
# Opaque session tokens (client portal)
# ---------------------------------------------------------------------------

@dataclass
class ClientAuth:
    client: Client
    token: str


async def get_current_client(
    request: Request,
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_db),
) -> ClientAuth:
    token = bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Token de acesso requerido")

    sessions = ClientSessionRepository(session)
    row = await sessions.get_by_token(token)
    if row is None:
        raise AuthenticationError("Sessão inválida")

    now = utcnow()
    if now > as_utc(row.expires_at):
        await sessions.delete_token(token)
        await session.commit()
        logger.info("Expired session %s... removed for client %s", token[:10], row.client_id)
        raise AuthenticationError("Sessão expirada")

    client = await ClientRepository(session).get_by_id(row.client_id)
    if client is None or client.status != "active":
        raise AuthenticationError("Conta inativa")

    try:
        await sessions.touch(row.id, now)
    except SQLAlchemyError as exc:
        logger.warning("Could not refresh last_activity for session %s: %s", row.id, exc)

    request.state.principal = Principal(id=client.id, kind="client", email=client.email, name=client.name)
    return ClientAuth(client=client, token=token)
