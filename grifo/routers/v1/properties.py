"""Property routes."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.deps import get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.domain.inspection import Inspection
from grifo.domain.property import Property
from grifo.schemas.common import IdPath
from grifo.schemas.property import (
    PropertyCreate,
    PropertyDetail,
    PropertyListItem,
    PropertyOut,
    PropertyUpdate,
)
from grifo.services.property import SORT_COLUMNS, PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])

property_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(session: AsyncSession, principal: Principal) -> PropertyService:
    return PropertyService(session, principal)


def _list_item(prop: Property, counts: dict[str, int], last: Inspection | None) -> PropertyListItem:
    return PropertyListItem.model_validate({
        **PropertyOut.model_validate(prop).model_dump(),
        "inspection_counts": counts,
        "last_inspection": last,
    })


@router.get("")
async def list_properties(
    filter_status: Literal["active", "inactive", "rented", "sold"] | None = Query(default=None, alias="status"),
    property_type: str | None = Query(default=None, max_length=50),
    city: str | None = Query(default=None, max_length=100),
    pagination: PaginationParams = Depends(property_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    """List properties with per-property inspection counts and the last inspection."""
    items, total, counts, last = await _svc(session, principal).list_properties(
        pagination, status=filter_status, property_type=property_type, city=city,
    )
    return paginated(
        "properties",
        [_list_item(p, counts.get(p.id, {}), last.get(p.id)) for p in items],
        total,
        pagination,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_property(
    body: PropertyCreate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    prop = await _svc(session, principal).create_property(body)
    return ok({"property": PropertyOut.model_validate(prop)}, "Propriedade criada com sucesso")


@router.get("/{property_id}")
async def get_property(
    property_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    prop, inspections = await _svc(session, principal).get_with_inspections(property_id)
    detail = PropertyDetail.model_validate({
        **PropertyOut.model_validate(prop).model_dump(),
        "inspections": inspections,
    })
    return ok({"property": detail})


@router.put("/{property_id}")
async def update_property(
    property_id: IdPath,
    body: PropertyUpdate,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    prop = await _svc(session, principal).update_property(property_id, body)
    return ok({"property": PropertyOut.model_validate(prop)}, "Propriedade atualizada com sucesso")


@router.delete("/{property_id}")
async def delete_property(
    property_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, principal).delete_property(property_id)
    return ok(message="Propriedade excluída com sucesso")
