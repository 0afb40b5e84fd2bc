"""Contests against inspection results."""

import pytest


def _new_contest(inspection, **overrides) -> dict:
    body = {
        "inspection_id": inspection.id,
        "contestant_name": "Maria Oliveira",
        "contestant_email": "maria@example.com",
        "contest_type": "dano_nao_reconhecido",
        "description": "O dano no piso da sala já existia antes da locação.",
    }
    body.update(overrides)
    return body


@pytest.fixture
async def completed_inspection(seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    return await make_inspection(prop, seed.users["inspector"], status="completed")


async def test_open_contest(api, seed, completed_inspection):
    resp = await api.post(
        "/api/v1/contests", json=_new_contest(completed_inspection), headers=seed.headers("manager"),
    )

    assert resp.status_code == 201
    contest = resp.json()["data"]["contest"]
    assert contest["status"] == "pending"
    assert contest["inspection"]["id"] == completed_inspection.id


async def test_only_one_open_contest_per_inspection(api, seed, completed_inspection):
    await api.post("/api/v1/contests", json=_new_contest(completed_inspection), headers=seed.headers("manager"))
    resp = await api.post(
        "/api/v1/contests", json=_new_contest(completed_inspection), headers=seed.headers("manager"),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Já existe uma contestação aberta para esta vistoria"


async def test_pending_inspection_cannot_be_contested(api, seed, make_property, make_inspection):
    inspection = await make_inspection(await make_property(seed.company_a), seed.users["inspector"])

    resp = await api.post("/api/v1/contests", json=_new_contest(inspection), headers=seed.headers("manager"))
    assert resp.status_code == 400


async def test_short_description_rejected(api, seed, completed_inspection):
    resp = await api.post(
        "/api/v1/contests",
        json=_new_contest(completed_inspection, description="curta"),
        headers=seed.headers("manager"),
    )

    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "description"


async def test_resolve_then_reopen(api, seed, completed_inspection):
    created = await api.post(
        "/api/v1/contests", json=_new_contest(completed_inspection), headers=seed.headers("manager"),
    )
    contest_id = created.json()["data"]["contest"]["id"]

    resp = await api.post(
        f"/api/v1/contests/{contest_id}/resolve",
        json={"status": "approved", "resolution_notes": "Dano confirmado no laudo anterior"},
        headers=seed.headers("inspector"),
    )
    assert resp.status_code == 403

    resp = await api.post(
        f"/api/v1/contests/{contest_id}/resolve",
        json={"status": "approved", "resolution_notes": "Dano confirmado no laudo anterior"},
        headers=seed.headers("manager"),
    )
    assert resp.status_code == 200
    resolved = resp.json()["data"]["contest"]
    assert resolved["status"] == "approved"
    assert resolved["resolved_by"] == seed.users["manager"].id
    assert resolved["resolved_at"] is not None

    resp = await api.put(
        f"/api/v1/contests/{contest_id}", json={"priority": "high"}, headers=seed.headers("manager"),
    )
    assert resp.status_code == 400

    resp = await api.post(
        f"/api/v1/contests/{contest_id}/reopen",
        json={"reason": "Novas evidências"},
        headers=seed.headers("admin"),
    )
    assert resp.status_code == 200
    reopened = resp.json()["data"]["contest"]
    assert reopened["status"] == "under_review"
    assert reopened["resolved_at"] is None


async def test_inspector_sees_contests_of_own_inspections(
    api, seed, make_property, make_inspection, completed_inspection,
):
    other = await make_inspection(
        await make_property(seed.company_a), seed.users["inspector2"], status="completed",
    )
    await api.post("/api/v1/contests", json=_new_contest(completed_inspection), headers=seed.headers("manager"))
    await api.post("/api/v1/contests", json=_new_contest(other), headers=seed.headers("manager"))

    resp = await api.get("/api/v1/contests", headers=seed.headers("inspector"))
    contests = resp.json()["data"]["contests"]
    assert [c["inspection_id"] for c in contests] == [completed_inspection.id]

    resp = await api.get("/api/v1/contests", headers=seed.headers("admin"))
    assert resp.json()["data"]["pagination"]["total"] == 2
