"""Standardized JSON response envelope helpers."""


from typing import Any

from pydantic import BaseModel

from grifo.core.pagination import PageMeta, PaginationParams


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


def ok(data: Any = None, message: str | None = None) -> dict:
    """Success envelope: `{ success: true, data: {...}, message? }`"""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = _dump(data)
    if message:
        body["message"] = message
    return body


def paginated(key: str, items: list, total: int, pagination: PaginationParams) -> dict:
    """List envelope: `{ success: true, data: { <key>: [...], pagination: {...} } }`"""
    meta = PageMeta.build(total, pagination.page, pagination.limit)
    return ok({key: items, "pagination": meta})
