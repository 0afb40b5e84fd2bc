"""User management routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import IdPath
from grifo.schemas.user import Role, UserCreate, UserOut, UserStatus, UserUpdate
from grifo.services.user import SORT_COLUMNS, UserService

router = APIRouter(prefix="/users", tags=["Users"])

user_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(session: AsyncSession, principal: Principal) -> UserService:
    return UserService(session, principal)


@router.get("")
async def list_users(
    role: Role | None = Query(default=None),
    filter_status: UserStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(user_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session, principal).list_users(pagination, role=role, status=filter_status)
    return paginated("users", [UserOut.model_validate(u) for u in items], total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    user = await _svc(session, principal).create_user(body)
    return ok({"user": UserOut.model_validate(user)}, "Usuário criado com sucesso")


@router.get("/{user_id}")
async def get_user(
    user_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    user = await _svc(session, principal).get_user(user_id)
    return ok({"user": UserOut.model_validate(user)})


@router.put("/{user_id}")
async def update_user(
    user_id: IdPath,
    body: UserUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    user = await _svc(session, principal).update_user(user_id, body)
    return ok({"user": UserOut.model_validate(user)}, "Usuário atualizado com sucesso")


@router.delete("/{user_id}")
async def delete_user(
    user_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, principal).delete_user(user_id)
    return ok(message="Usuário excluído com sucesso")
