"""Property management."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal
from grifo.domain.inspection import Inspection
from grifo.domain.property import Property
from grifo.repositories.base import unique_guard
from grifo.repositories.property import PropertyRepository
from grifo.schemas.property import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)

DUPLICATE_ADDRESS = "Já existe uma propriedade com este endereço e CEP"

SORT_COLUMNS = {
    "created_at": Property.created_at,
    "updated_at": Property.updated_at,
    "address": Property.address,
    "city": Property.city,
    "area": Property.area,
    "status": Property.status,
    "owner_name": Property.owner_name,
}

SEARCH_COLUMNS = (
    Property.address,
    Property.zip_code,
    Property.owner_name,
    Property.owner_email,
    Property.city,
    Property.neighborhood,
)


def _normalize(fields: dict) -> dict:
    if fields.get("area") is not None:
        fields["area"] = Decimal(str(fields["area"]))
    return fields


class PropertyService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        self._repo = PropertyRepository(session, tenant_scope(principal))

    async def list_properties(
        self,
        pagination: PaginationParams,
        status: str | None = None,
        property_type: str | None = None,
        city: str | None = None,
    ) -> tuple[list[Property], int, dict[str, dict[str, int]], dict[str, Inspection]]:
        """Rows and total, plus inspection counts and the last inspection per row."""
        query = self._repo.list_query(
            sort_columns=SORT_COLUMNS, search_columns=SEARCH_COLUMNS,
        ).equals(status=status, property_type=property_type, city=city)
        items, total = await query.fetch(self._session, pagination)
        ids = [p.id for p in items]
        counts = await self._repo.inspection_counts(ids)
        last = await self._repo.last_inspections(ids)
        return items, total, counts, last

    async def get_property(self, property_id: str) -> Property:
        prop = await self._repo.get_by_id(property_id)
        if prop is None:
            raise NotFoundError("Propriedade")
        return prop

    async def get_with_inspections(self, property_id: str) -> tuple[Property, list[Inspection]]:
        prop = await self.get_property(property_id)
        return prop, await self._repo.inspections_for(prop.id)

    async def create_property(self, data: PropertyCreate) -> Property:
        require(self._principal, "property", "create")
        with unique_guard(DUPLICATE_ADDRESS):
            prop = await self._repo.create(
                **_normalize(data.model_dump(exclude_unset=True)),
                company_id=self._principal.company_id,
                created_by=self._principal.id,
                updated_by=self._principal.id,
            )
        logger.info("Property %s created in company %s", prop.id, prop.company_id)
        return prop

    async def update_property(self, property_id: str, data: PropertyUpdate) -> Property:
        prop = await self.get_property(property_id)
        require(self._principal, "property", "update", prop)
        changes = _normalize(data.changes())
        if not changes:
            return prop
        with unique_guard(DUPLICATE_ADDRESS):
            return await self._repo.update(prop.id, **changes, updated_by=self._principal.id)

    async def delete_property(self, property_id: str) -> None:
        prop = await self.get_property(property_id)
        require(self._principal, "property", "delete", prop)
        if await self._repo.has_inspections(prop.id):
            raise ValidationError("Não é possível excluir propriedade com vistorias")
        await self._repo.soft_delete(prop.id, deleted_by=self._principal.id)
        logger.info("Property %s deleted by %s", prop.id, self._principal.id)
