"""Inspections: scheduling, status workflow and inspector visibility."""

from datetime import timedelta

from grifo.domain.mixins import utcnow


def _future(days: int = 5) -> str:
    return (utcnow() + timedelta(days=days)).isoformat()


def _new_inspection(prop, inspector, **overrides) -> dict:
    body = {
        "property_id": prop.id,
        "inspector_id": inspector.id,
        "inspection_type": "entrada",
        "scheduled_date": _future(),
        "priority": "high",
    }
    body.update(overrides)
    return body


async def test_create_inspection(api, seed, make_property):
    prop = await make_property(seed.company_a)

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["inspector"]),
        headers=seed.headers("manager"),
    )

    assert resp.status_code == 201
    inspection = resp.json()["data"]["inspection"]
    assert inspection["status"] == "pending"
    assert inspection["property"]["id"] == prop.id
    assert inspection["inspector"]["id"] == seed.users["inspector"].id


async def test_second_open_inspection_rejected(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    await make_inspection(prop, seed.users["inspector"])

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["inspector2"]),
        headers=seed.headers("manager"),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Já existe uma vistoria pendente ou em andamento para esta propriedade"


async def test_new_inspection_allowed_after_completion(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    await make_inspection(prop, seed.users["inspector"], status="completed")

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["inspector"]),
        headers=seed.headers("manager"),
    )
    assert resp.status_code == 201


async def test_past_date_rejected(api, seed, make_property):
    prop = await make_property(seed.company_a)

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["inspector"], scheduled_date=_future(-1)),
        headers=seed.headers("manager"),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Data agendada deve ser no futuro"


async def test_viewer_cannot_be_assigned(api, seed, make_property):
    prop = await make_property(seed.company_a)

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["viewer"]),
        headers=seed.headers("manager"),
    )
    assert resp.status_code == 400


async def test_inspector_from_other_tenant_rejected(api, seed, make_property):
    prop = await make_property(seed.company_a)

    resp = await api.post(
        "/api/v1/inspections",
        json=_new_inspection(prop, seed.users["admin_b"]),
        headers=seed.headers("manager"),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Inspetor não encontrado"


async def test_status_workflow(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    inspection = await make_inspection(prop, seed.users["inspector"])
    url = f"/api/v1/inspections/{inspection.id}"
    inspector = seed.headers("inspector")

    resp = await api.put(url, json={"status": "completed"}, headers=inspector)
    assert resp.status_code == 400

    resp = await api.put(url, json={"status": "in_progress"}, headers=inspector)
    assert resp.status_code == 200
    assert resp.json()["data"]["inspection"]["status"] == "in_progress"

    resp = await api.put(
        url, json={"status": "completed", "inspector_notes": "Tudo em ordem"}, headers=inspector,
    )
    assert resp.status_code == 200
    done = resp.json()["data"]["inspection"]
    assert done["status"] == "completed"
    assert done["completed_date"] is not None

    resp = await api.put(url, json={"status": "pending"}, headers=seed.headers("admin"))
    assert resp.status_code == 400


async def test_other_inspector_cannot_start(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    inspection = await make_inspection(prop, seed.users["inspector"])

    resp = await api.put(
        f"/api/v1/inspections/{inspection.id}",
        json={"status": "in_progress"},
        headers=seed.headers("inspector2"),
    )
    assert resp.status_code == 404


async def test_inspector_cannot_cancel_or_reschedule(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    inspection = await make_inspection(prop, seed.users["inspector"])
    url = f"/api/v1/inspections/{inspection.id}"

    resp = await api.put(url, json={"status": "cancelled"}, headers=seed.headers("inspector"))
    assert resp.status_code == 403

    resp = await api.put(url, json={"scheduled_date": _future(10)}, headers=seed.headers("inspector"))
    assert resp.status_code == 403

    resp = await api.put(url, json={"scheduled_date": _future(10)}, headers=seed.headers("manager"))
    assert resp.status_code == 200


async def test_inspectors_only_see_their_inspections(api, seed, make_property, make_inspection):
    mine = await make_inspection(await make_property(seed.company_a), seed.users["inspector"])
    theirs = await make_inspection(await make_property(seed.company_a), seed.users["inspector2"])

    resp = await api.get("/api/v1/inspections", headers=seed.headers("inspector"))
    ids = [i["id"] for i in resp.json()["data"]["inspections"]]
    assert ids == [mine.id]

    resp = await api.get(f"/api/v1/inspections/{theirs.id}", headers=seed.headers("inspector"))
    assert resp.status_code == 404

    resp = await api.get("/api/v1/inspections", headers=seed.headers("manager"))
    assert resp.json()["data"]["pagination"]["total"] == 2


async def test_list_filters_by_date_range_inclusively(api, seed, make_property, make_inspection):
    day = (utcnow() + timedelta(days=10)).replace(hour=23, minute=30, second=0, microsecond=0)
    await make_inspection(await make_property(seed.company_a), seed.users["inspector"], scheduled_date=day)
    await make_inspection(
        await make_property(seed.company_a), seed.users["inspector"], scheduled_date=day + timedelta(days=2),
    )

    resp = await api.get(
        "/api/v1/inspections",
        params={"date_from": day.date().isoformat(), "date_to": day.date().isoformat()},
        headers=seed.headers("manager"),
    )
    assert resp.json()["data"]["pagination"]["total"] == 1


async def test_delete_only_pending(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    started = await make_inspection(prop, seed.users["inspector"], status="in_progress")

    resp = await api.delete(f"/api/v1/inspections/{started.id}", headers=seed.headers("manager"))
    assert resp.status_code == 400

    pending = await make_inspection(await make_property(seed.company_a), seed.users["inspector"])
    resp = await api.delete(f"/api/v1/inspections/{pending.id}", headers=seed.headers("manager"))
    assert resp.status_code == 200

    resp = await api.get(f"/api/v1/inspections/{pending.id}", headers=seed.headers("manager"))
    assert resp.status_code == 404
