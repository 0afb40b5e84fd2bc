"""User management within a tenant."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal, hash_password
from grifo.domain.user import User
from grifo.repositories.base import unique_guard
from grifo.repositories.user import UserRepository
from grifo.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Email já cadastrado"

SORT_COLUMNS = {
    "created_at": User.created_at,
    "name": User.name,
    "role": User.role,
    "last_login": User.last_login,
}


class UserService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        self._repo = UserRepository(session, tenant_scope(principal))

    async def list_users(self, pagination: PaginationParams, role: str | None = None, status: str | None = None):
        require(self._principal, "user", "read")
        query = self._repo.list_query(
            sort_columns=SORT_COLUMNS,
            search_columns=(User.name, User.email),
        ).equals(role=role, status=status)
        return await query.fetch(self._session, pagination)

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuário")
        if user.id != self._principal.id:
            require(self._principal, "user", "read")
        return user

    async def create_user(self, data: UserCreate) -> User:
        require(self._principal, "user", "create")
        if data.role == "super_admin" and not self._principal.is_super_admin:
            raise ValidationError("Papel inválido")
        fields = data.model_dump(exclude={"password"})
        with unique_guard(DUPLICATE_EMAIL):
            user = await self._repo.create(
                **fields,
                company_id=self._principal.company_id,
                password_hash=hash_password(data.password),
                status="active",
                created_by=self._principal.id,
                updated_by=self._principal.id,
            )
        logger.info("User %s created in company %s by %s", user.id, user.company_id, self._principal.id)
        return user

    async def update_user(self, user_id: str, data: UserUpdate) -> User:
        user = await self.get_user(user_id)
        require(self._principal, "user", "update", user)
        changes = data.changes()
        if "role" in changes or "status" in changes:
            require(self._principal, "user", "change_role", user)
            if changes.get("role") == "super_admin" and not self._principal.is_super_admin:
                raise ValidationError("Papel inválido")
        if not changes:
            return user
        with unique_guard(DUPLICATE_EMAIL):
            return await self._repo.update(user.id, **changes, updated_by=self._principal.id)

    async def delete_user(self, user_id: str) -> None:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuário")
        require(self._principal, "user", "delete", user)
        await self._repo.soft_delete(user.id, deleted_by=self._principal.id)
        logger.info("User %s deleted by %s", user.id, self._principal.id)
