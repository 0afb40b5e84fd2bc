"""Authorization rules: one decision table shared by every route.

``authorize(principal, resource, action, record)`` is pure: it never queries
the database and returns the same answer wherever it is called from. Tenant
row-scoping is separate (``tenant_scope``): it is applied as a query filter,
so rows of another company are simply not found.
"""


from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from grifo.core.exceptions import ForbiddenError
from grifo.core.security import Principal

MANAGERS = frozenset({"admin", "manager"})
ADMINS = frozenset({"admin"})
WRITERS = frozenset({"admin", "manager", "inspector"})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


def tenant_scope(principal: Principal) -> str | None:
    """Company filter for queries; ``None`` means unscoped (super_admin)."""
    if principal.is_super_admin:
        return None
    return principal.company_id


def _field(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _roles(allowed: frozenset[str], reason: str) -> Callable[[Principal, Any], Decision]:
    def rule(principal: Principal, record: Any) -> Decision:
        return ALLOW if principal.role in allowed else deny(reason)
    return rule


def _any_user(principal: Principal, record: Any) -> Decision:
    return ALLOW


def _writer(reason: str) -> Callable[[Principal, Any], Decision]:
    return _roles(WRITERS, reason)


def _assigned_inspector(reason: str) -> Callable[[Principal, Any], Decision]:
    """admin|manager, or the inspector the inspection is assigned to."""
    def rule(principal: Principal, record: Any) -> Decision:
        if principal.role in MANAGERS:
            return ALLOW
        if principal.role == "inspector" and _field(record, "inspector_id") == principal.id:
            return ALLOW
        return deny(reason)
    return rule


def _upload_delete(principal: Principal, record: Any) -> Decision:
    if principal.role in MANAGERS or _field(record, "uploaded_by") == principal.id:
        return ALLOW
    return deny("Sem permissão para excluir este arquivo")


def _user_delete(principal: Principal, record: Any) -> Decision:
    if principal.role not in ADMINS:
        return deny("Apenas administradores podem excluir usuários")
    if _field(record, "id") == principal.id:
        return deny("Você não pode excluir a si mesmo")
    return ALLOW


def _user_update(principal: Principal, record: Any) -> Decision:
    if principal.role in ADMINS or _field(record, "id") == principal.id:
        return ALLOW
    return deny("Sem permissão para atualizar este usuário")


def _company_read(principal: Principal, record: Any) -> Decision:
    if _field(record, "id") == principal.company_id:
        return ALLOW
    return deny("Sem permissão para visualizar esta empresa")


def _company_update(principal: Principal, record: Any) -> Decision:
    if _field(record, "id") != principal.company_id:
        return deny("Sem permissão para atualizar esta empresa")
    if principal.role not in ADMINS:
        return deny("Apenas administradores podem atualizar dados da empresa")
    return ALLOW


def _super_admin_only(reason: str) -> Callable[[Principal, Any], Decision]:
    def rule(principal: Principal, record: Any) -> Decision:
        return deny(reason)
    return rule


RULES: dict[tuple[str, str], Callable[[Principal, Any], Decision]] = {
    # Properties
    ("property", "read"): _any_user,
    ("property", "create"): _roles(MANAGERS, "Sem permissão para criar propriedades"),
    ("property", "update"): _roles(MANAGERS, "Sem permissão para atualizar propriedades"),
    ("property", "delete"): _roles(ADMINS, "Sem permissão para excluir propriedades"),
    # Inspections
    ("inspection", "read"): _any_user,
    ("inspection", "create"): _roles(MANAGERS, "Sem permissão para criar vistorias"),
    ("inspection", "update"): _assigned_inspector("Sem permissão para atualizar esta vistoria"),
    ("inspection", "start"): _assigned_inspector("Apenas o inspetor responsável pode iniciar a vistoria"),
    ("inspection", "complete"): _assigned_inspector("Apenas o inspetor responsável pode concluir a vistoria"),
    ("inspection", "cancel"): _roles(MANAGERS, "Sem permissão para cancelar vistorias"),
    ("inspection", "reassign"): _roles(MANAGERS, "Sem permissão para alterar inspetor"),
    ("inspection", "reschedule"): _roles(MANAGERS, "Sem permissão para reagendar vistorias"),
    ("inspection", "delete"): _roles(MANAGERS, "Sem permissão para excluir vistorias"),
    # Contests
    ("contest", "read"): _any_user,
    ("contest", "create"): _writer("Sem permissão para criar contestações"),
    ("contest", "update"): _writer("Sem permissão para atualizar contestações"),
    ("contest", "resolve"): _roles(MANAGERS, "Sem permissão para resolver contestações"),
    ("contest", "reopen"): _roles(MANAGERS, "Sem permissão para reabrir contestações"),
    ("contest", "create_link"): _roles(MANAGERS, "Sem permissão para gerar links de contestação"),
    # Uploads
    ("upload", "read"): _any_user,
    ("upload", "create"): _writer("Sem permissão para enviar arquivos"),
    ("upload", "delete"): _upload_delete,
    ("upload", "bulk_delete"): _roles(MANAGERS, "Sem permissão para exclusão em lote"),
    # Users
    ("user", "read"): _roles(MANAGERS, "Sem permissão para visualizar usuários"),
    ("user", "create"): _roles(ADMINS, "Apenas administradores podem criar usuários"),
    ("user", "update"): _user_update,
    ("user", "change_role"): _roles(ADMINS, "Apenas administradores podem alterar papéis"),
    ("user", "delete"): _user_delete,
    # Companies
    ("company", "read"): _company_read,
    ("company", "create"): _super_admin_only("Apenas super administradores podem criar empresas"),
    ("company", "update"): _company_update,
    ("company", "change_plan"): _super_admin_only(
        "Apenas super administradores podem alterar plano ou status"
    ),
    # Client administration
    ("client", "manage"): _roles(MANAGERS, "Sem permissão para gerenciar clientes"),
    # Sync operations
    ("sync", "read"): _any_user,
    ("sync", "trigger"): _roles(MANAGERS, "Sem permissão para iniciar sincronização"),
    ("sync", "cancel"): _roles(MANAGERS, "Sem permissão para cancelar sincronização"),
    ("sync", "retry"): _roles(MANAGERS, "Sem permissão para repetir sincronização"),
    # Dashboard
    ("dashboard", "read"): _any_user,
    ("dashboard", "users_stats"): _roles(MANAGERS, "Sem permissão para estatísticas de usuários"),
    # Reports
    ("report", "read"): _roles(MANAGERS, "Sem permissão para visualizar relatórios"),
}


def authorize(principal: Principal, resource: str, action: str, record: Any = None) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on ``resource``."""
    rule = RULES.get((resource, action))
    if rule is None:
        return deny(f"Ação desconhecida: {resource}.{action}")
    if principal.is_super_admin:
        return ALLOW
    if principal.kind != "user":
        return deny("Acesso negado")
    if principal.role == "viewer" and action not in {"read"}:
        return deny("Usuários visualizadores não podem alterar dados")
    return rule(principal, record)


def ensure(decision: Decision) -> None:
    """Raise ForbiddenError for a denied decision."""
    if not decision.allowed:
        raise ForbiddenError(decision.reason or "Acesso negado")


def require(principal: Principal, resource: str, action: str, record: Any = None) -> None:
    ensure(authorize(principal, resource, action, record))


def sees_only_own_inspections(principal: Principal) -> bool:
    """Inspectors are row-scoped to inspections assigned to them."""
    return principal.role == "inspector" and not principal.is_super_admin
