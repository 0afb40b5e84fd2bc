"""Audit logging middleware: records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from grifo.repositories.audit import AuditRepository

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_ID_LENGTH = 36


def entity_from_path(path: str) -> tuple[str, str | None]:
    """``/api/v1/properties/<id>/...`` -> ``("property", "<id>")``."""
    parts = [p for p in path.strip("/").split("/") if p]
    if parts[:2] in (["api", "v1"], ["api", "public"]):
        parts = parts[2:]
    if not parts:
        return "unknown", None
    resource = parts[0]
    entity_id = next((p for p in parts[1:] if len(p) == _ID_LENGTH and p.count("-") == 4), None)
    singular = resource[:-3] + "y" if resource.endswith("ies") else resource.rstrip("s")
    return singular or resource, entity_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written in a background task after the response is
    produced. Failures are logged and never reach the caller.
    """

    def __init__(self, app):
        super().__init__(app)
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        settings = request.app.state.settings
        if request.method in _WRITE_METHODS and settings.audit_enabled:
            task = asyncio.create_task(self._record(request, response.status_code, duration_ms))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        principal = getattr(request.state, "principal", None)
        entity_type, entity_id = entity_from_path(request.url.path)
        try:
            async with request.app.state.db.session() as session:
                await AuditRepository(session).append(
                    company_id=getattr(principal, "company_id", None),
                    user_id=getattr(principal, "id", None),
                    principal_kind=getattr(principal, "kind", None),
                    ip_address=request.client.host if request.client else None,
                    user_agent=(request.headers.get("user-agent") or "")[:512] or None,
                    method=request.method,
                    path=request.url.path[:500],
                    status_code=status_code,
                    duration_ms=duration_ms,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    description=f"{request.method} {entity_type} -> {status_code}",
                )
        except Exception as exc:
            logger.warning("Audit write failed for %s %s: %s", request.method, request.url.path, exc)
