"""Portal / mobile user authentication."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from grifo.core.security import Principal, create_access_token, hash_password, verify_password
from grifo.domain.mixins import utcnow
from grifo.domain.user import User
from grifo.repositories.user import UserRepository
from grifo.schemas.auth import ChangePasswordRequest, LoginRequest

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession, settings: Settings):
        self._users = UserRepository(session)
        self._settings = settings

    def _issue(self, user: User) -> dict:
        token = create_access_token(
            self._settings,
            user_id=user.id,
            role=user.role,
            company_id=user.company_id,
            email=user.email,
            name=user.name,
        )
        return {
            "token": token,
            "expires_in": self._settings.jwt_expire_minutes * 60,
            "user": user,
        }

    async def login(self, data: LoginRequest) -> dict:
        user = await self._users.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for %s", data.email)
            raise AuthenticationError("Credenciais inválidas")
        if user.status != "active":
            logger.info("Login refused for inactive user %s", user.id)
            raise AuthenticationError("Usuário inativo")

        user = await self._users.update(user.id, last_login=utcnow())
        logger.info("User %s logged in (company %s)", user.id, user.company_id)
        return self._issue(user)

    async def current_user(self, principal: Principal) -> User:
        user = await self._users.get_by_id(principal.id)
        if user is None:
            raise NotFoundError("Usuário")
        return user

    async def refresh(self, principal: Principal) -> dict:
        user = await self.current_user(principal)
        if user.status != "active":
            raise AuthenticationError("Usuário inativo")
        return self._issue(user)

    async def change_password(self, principal: Principal, data: ChangePasswordRequest) -> None:
        user = await self.current_user(principal)
        if not verify_password(data.current_password, user.password_hash):
            raise ValidationError("Senha atual incorreta")
        if data.current_password == data.new_password:
            raise ValidationError("A nova senha deve ser diferente da atual")
        await self._users.update(user.id, password_hash=hash_password(data.new_password), updated_by=user.id)
        logger.info("User %s changed password", user.id)
