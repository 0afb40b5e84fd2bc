"""User repository."""

from sqlalchemy import func

from grifo.domain.user import User
from grifo.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()
