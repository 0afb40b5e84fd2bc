"""Inspection scheduling and status workflow."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, sees_only_own_inspections, tenant_scope
from grifo.core.security import Principal
from grifo.domain.inspection import Inspection
from grifo.domain.mixins import as_utc, utcnow
from grifo.domain.property import Property
from grifo.domain.user import User
from grifo.repositories.base import unique_guard
from grifo.repositories.inspection import InspectionRepository
from grifo.repositories.property import PropertyRepository
from grifo.repositories.user import UserRepository
from grifo.schemas.inspection import InspectionCreate, InspectionUpdate

logger = logging.getLogger(__name__)

OPEN_INSPECTION_EXISTS = "Já existe uma vistoria pendente ou em andamento para esta propriedade"
INSPECTOR_ROLES = ("inspector", "manager", "admin")

# status -> {next status: permission action}
TRANSITIONS: dict[str, dict[str, str]] = {
    "pending": {"in_progress": "start", "cancelled": "cancel"},
    "in_progress": {"completed": "complete", "cancelled": "cancel"},
    "completed": {},
    "cancelled": {},
}

SCHEDULING_FIELDS = {"scheduled_date", "priority", "inspection_type"}

SORT_COLUMNS = {
    "created_at": Inspection.created_at,
    "scheduled_date": Inspection.scheduled_date,
    "completed_date": Inspection.completed_date,
    "status": Inspection.status,
    "priority": Inspection.priority,
}

SEARCH_COLUMNS = (Property.address, Property.owner_name, Property.city)


def _ensure_future(when: datetime) -> datetime:
    when = as_utc(when)
    if when <= utcnow():
        raise ValidationError("Data agendada deve ser no futuro")
    return when


class InspectionService:
    def __init__(self, session: AsyncSession, principal: Principal):
        self._session = session
        self._principal = principal
        scope = tenant_scope(principal)
        self._repo = InspectionRepository(session, scope)
        self._properties = PropertyRepository(session, scope)

    def _visibility(self) -> list:
        if sees_only_own_inspections(self._principal):
            return [Inspection.inspector_id == self._principal.id]
        return []

    async def list_inspections(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        inspector_id: str | None = None,
        property_id: str | None = None,
        priority: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ):
        query = (
            self._repo.list_query(
                sort_columns=SORT_COLUMNS,
                search_columns=SEARCH_COLUMNS,
                base=self._repo.with_property(),
            )
            .where(*self._visibility())
            .equals(status=status, inspector_id=inspector_id, property_id=property_id, priority=priority)
            .between(Inspection.scheduled_date, date_from, date_to)
        )
        return await query.fetch(self._session, pagination)

    async def get_inspection(self, inspection_id: str) -> Inspection:
        inspection = await self._repo.get_by_id(inspection_id)
        if inspection is None:
            raise NotFoundError("Vistoria")
        if sees_only_own_inspections(self._principal) and inspection.inspector_id != self._principal.id:
            raise NotFoundError("Vistoria")
        return inspection

    async def _valid_inspector(self, inspector_id: str, company_id: str) -> User:
        inspector = await UserRepository(self._session, company_id).get_by_id(inspector_id)
        if inspector is None:
            raise ValidationError("Inspetor não encontrado")
        if inspector.status != "active" or inspector.role not in INSPECTOR_ROLES:
            raise ValidationError("Inspetor inválido ou inativo")
        return inspector

    async def create_inspection(self, data: InspectionCreate) -> Inspection:
        require(self._principal, "inspection", "create")
        prop = await self._properties.get_by_id(data.property_id)
        if prop is None:
            raise NotFoundError("Propriedade")
        if prop.status != "active":
            raise ValidationError("Propriedade não está ativa")
        await self._valid_inspector(data.inspector_id, prop.company_id)

        fields = data.model_dump(exclude_unset=True)
        fields["scheduled_date"] = _ensure_future(data.scheduled_date)
        with unique_guard(OPEN_INSPECTION_EXISTS):
            inspection = await self._repo.create(
                **fields,
                company_id=prop.company_id,
                status="pending",
                created_by=self._principal.id,
                updated_by=self._principal.id,
            )
        logger.info(
            "Inspection %s scheduled for property %s (inspector %s)",
            inspection.id, prop.id, inspection.inspector_id,
        )
        return inspection

    async def update_inspection(self, inspection_id: str, data: InspectionUpdate) -> Inspection:
        inspection = await self.get_inspection(inspection_id)
        changes = data.changes()
        if not changes:
            return inspection

        if "status" in changes and changes["status"] != inspection.status:
            target = changes["status"]
            action = TRANSITIONS[inspection.status].get(target)
            if action is None:
                raise ValidationError(
                    f"Transição de status inválida: {inspection.status} → {target}"
                )
            require(self._principal, "inspection", action, inspection)
            if target == "completed":
                changes["completed_date"] = utcnow()
        else:
            changes.pop("status", None)

        if "inspector_id" in changes and changes["inspector_id"] != inspection.inspector_id:
            require(self._principal, "inspection", "reassign", inspection)
            await self._valid_inspector(changes["inspector_id"], inspection.company_id)

        if SCHEDULING_FIELDS & changes.keys():
            require(self._principal, "inspection", "reschedule", inspection)
            if "scheduled_date" in changes:
                changes["scheduled_date"] = _ensure_future(changes["scheduled_date"])

        require(self._principal, "inspection", "update", inspection)
        updated = await self._repo.update(inspection.id, **changes, updated_by=self._principal.id)
        logger.info("Inspection %s updated by %s: %s", inspection.id, self._principal.id, sorted(changes))
        return updated

    async def delete_inspection(self, inspection_id: str) -> None:
        inspection = await self.get_inspection(inspection_id)
        require(self._principal, "inspection", "delete", inspection)
        if inspection.status != "pending":
            raise ValidationError("Apenas vistorias pendentes podem ser excluídas")
        if await self._repo.has_contests(inspection.id):
            raise ValidationError("Não é possível excluir vistoria com contestações")
        await self._repo.soft_delete(inspection.id, deleted_by=self._principal.id)
        logger.info("Inspection %s deleted by %s", inspection.id, self._principal.id)
