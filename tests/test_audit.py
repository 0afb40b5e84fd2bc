"""Audit trail of write requests."""

import asyncio

from sqlalchemy import select

from grifo.domain import AuditTrail
from grifo.middleware.audit import entity_from_path


async def _audit_rows(db, expected: int, attempts: int = 50) -> list[AuditTrail]:
    for _ in range(attempts):
        async with db.session() as session:
            rows = list((await session.execute(select(AuditTrail))).scalars().all())
        if len(rows) >= expected:
            return rows
        await asyncio.sleep(0.02)
    return rows


def test_entity_from_path():
    pid = "6f1c2a34-1b2c-4d5e-8f90-123456789abc"
    assert entity_from_path(f"/api/v1/properties/{pid}") == ("property", pid)
    assert entity_from_path(f"/api/v1/sync/{pid}/retry") == ("sync", pid)
    assert entity_from_path("/api/v1/uploads/bulk-delete") == ("upload", None)
    assert entity_from_path("/api/public/contest/abcDEF123_-xyz7890") == ("contest", None)
    assert entity_from_path("/") == ("unknown", None)


async def test_write_requests_are_recorded(api, db, seed, settings):
    settings.audit_enabled = True

    resp = await api.post(
        "/api/v1/properties",
        json={
            "address": "Rua Oscar Freire, 10",
            "zip_code": "01426-000",
            "city": "São Paulo",
            "state": "SP",
            "property_type": "store",
        },
        headers=seed.headers("manager"),
    )
    assert resp.status_code == 201
    await api.get("/api/v1/properties", headers=seed.headers("manager"))

    rows = await _audit_rows(db, 1)

    assert len(rows) == 1
    row = rows[0]
    assert (row.method, row.status_code) == ("POST", 201)
    assert row.path == "/api/v1/properties"
    assert row.principal_kind == "user"
    assert row.entity_type == "property"
    assert row.user_id == seed.users["manager"].id
    assert row.company_id == seed.company_a.id


async def test_audit_disabled(api, db, seed):
    await api.post("/api/v1/clients/register", json={"name": "Ana Silva", "email": "a@x.com", "password": "abcdef"})
    await asyncio.sleep(0.05)

    async with db.session() as session:
        assert (await session.execute(select(AuditTrail))).first() is None
