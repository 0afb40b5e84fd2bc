"""Client-portal repositories: accounts and their opaque sessions."""

from datetime import datetime

from sqlalchemy import delete, select, update

from grifo.domain.client import Client, ClientSession
from grifo.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    model = Client

    async def get_by_email(self, email: str) -> Client | None:
        result = await self._session.execute(
            self._base_query().where(Client.email == email.lower())
        )
        return result.scalars().first()


class ClientSessionRepository:
    """Sessions are hard-deleted on logout, expiry and account deactivation."""

    def __init__(self, session):
        self._session = session

    async def create(self, *, client_id: str, token: str, expires_at: datetime) -> ClientSession:
        row = ClientSession(client_id=client_id, session_token=token, expires_at=expires_at)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get_by_token(self, token: str) -> ClientSession | None:
        result = await self._session.execute(
            select(ClientSession).where(ClientSession.session_token == token)
        )
        return result.scalars().first()

    async def touch(self, session_id: str, when: datetime) -> None:
        await self._session.execute(
            update(ClientSession)
            .where(ClientSession.id == session_id)
            .values(last_activity=when)
            .execution_options(synchronize_session=False)
        )

    async def delete_token(self, token: str) -> int:
        result = await self._session.execute(
            delete(ClientSession).where(ClientSession.session_token == token)
        )
        return result.rowcount

    async def delete_for_client(self, client_id: str) -> int:
        result = await self._session.execute(
            delete(ClientSession).where(ClientSession.client_id == client_id)
        )
        return result.rowcount
