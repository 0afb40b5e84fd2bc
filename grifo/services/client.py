"""Client-portal accounts: registration, sessions, profile and administration."""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import AuthenticationError, NotFoundError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require
from grifo.core.security import Principal, hash_password, new_session_token, verify_password
from grifo.domain.client import Client
from grifo.domain.mixins import utcnow
from grifo.repositories.base import unique_guard
from grifo.repositories.client import ClientRepository, ClientSessionRepository
from grifo.schemas.client import ClientLogin, ClientProfileUpdate, ClientRegister

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Email já cadastrado"

SORT_COLUMNS = {
    "created_at": Client.created_at,
    "name": Client.name,
    "email": Client.email,
    "status": Client.status,
}


class ClientService:
    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self._session = session
        self._clients = ClientRepository(session)
        self._sessions = ClientSessionRepository(session)
        self._settings = settings

    # ------------------------------------------------------------------
    # Self-service
    # ------------------------------------------------------------------

    async def register(self, data: ClientRegister) -> Client:
        fields = data.model_dump(exclude={"password"}, exclude_unset=True)
        with unique_guard(DUPLICATE_EMAIL):
            client = await self._clients.create(
                **fields, password_hash=hash_password(data.password), status="active",
            )
        logger.info("Client %s registered", client.id)
        return client

    async def login(self, data: ClientLogin) -> dict:
        client = await self._clients.get_by_email(data.email)
        if client is None or not verify_password(data.password, client.password_hash):
            logger.info("Failed client login for %s", data.email)
            raise AuthenticationError("Credenciais inválidas")
        if client.status != "active":
            raise AuthenticationError("Conta inativa")

        token = new_session_token()
        days = self._settings.client_session_days if self._settings else 7
        expires_at = utcnow() + timedelta(days=days)
        await self._sessions.create(client_id=client.id, token=token, expires_at=expires_at)
        logger.info("Client %s opened session %s...", client.id, token[:10])
        return {"token": token, "expires_at": expires_at, "client": client}

    async def logout(self, token: str) -> None:
        await self._sessions.delete_token(token)

    async def update_profile(self, client: Client, data: ClientProfileUpdate) -> Client:
        changes = data.changes()
        if not changes:
            return client
        return await self._clients.update(client.id, **changes)

    # ------------------------------------------------------------------
    # Administration (portal users)
    # ------------------------------------------------------------------

    async def list_clients(self, principal: Principal, pagination: PaginationParams, status: str | None = None):
        require(principal, "client", "manage")
        query = self._clients.list_query(
            sort_columns=SORT_COLUMNS,
            search_columns=(Client.name, Client.email),
        ).equals(status=status)
        return await query.fetch(self._session, pagination)

    async def get_client(self, principal: Principal, client_id: str) -> Client:
        require(principal, "client", "manage")
        client = await self._clients.get_by_id(client_id)
        if client is None:
            raise NotFoundError("Cliente")
        return client

    async def set_status(self, principal: Principal, client_id: str, status: str) -> Client:
        client = await self.get_client(principal, client_id)
        client = await self._clients.update(client.id, status=status)
        if status != "active":
            removed = await self._sessions.delete_for_client(client.id)
            logger.info("Client %s set to %s; %d session(s) removed", client.id, status, removed)
        return client

    async def delete_client(self, principal: Principal, client_id: str) -> None:
        client = await self.get_client(principal, client_id)
        await self._sessions.delete_for_client(client.id)
        await self._clients.hard_delete(client.id)
        logger.info("Client %s deleted by %s", client.id, principal.id)
