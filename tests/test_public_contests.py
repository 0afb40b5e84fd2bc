"""Single-use public contest links."""

from datetime import timedelta

import pytest
from sqlalchemy import select, update

from grifo.domain import Contest, ContestLink
from grifo.domain.mixins import utcnow

SUBMISSION = {
    "contestant_name": "Carlos Souza",
    "contestant_email": "Carlos@Example.com",
    "contestant_phone": "+55 11 98888-7777",
    "description": "A infiltração no banheiro já constava no laudo de entrada.",
}


@pytest.fixture
def completed_inspection(seed, make_property, make_inspection):
    async def factory():
        prop = await make_property(seed.company_a)
        return await make_inspection(prop, seed.users["inspector"], status="completed")

    return factory


async def _issue(api, seed, inspection, role="manager", **body) -> dict:
    resp = await api.post(
        "/api/v1/contests/links",
        json={"inspection_id": inspection.id, **body},
        headers=seed.headers(role),
    )
    assert resp.status_code == 201
    return resp.json()["data"]["link"]


async def _contest_for(db, inspection) -> Contest:
    async with db.session() as session:
        result = await session.execute(select(Contest).where(Contest.inspection_id == inspection.id))
        return result.scalars().one()


async def test_manager_issues_link(api, seed, completed_inspection):
    inspection = await completed_inspection()

    link = await _issue(api, seed, inspection, expires_in_days=3)

    assert link["url"] == f"http://localhost:3000/contest/{link['token']}"
    assert link["is_used"] is False
    assert link["created_by"] == seed.users["manager"].id


async def test_link_rules(api, seed, make_property, make_inspection, completed_inspection):
    inspection = await completed_inspection()
    resp = await api.post(
        "/api/v1/contests/links", json={"inspection_id": inspection.id}, headers=seed.headers("inspector"),
    )
    assert resp.status_code == 403

    pending = await make_inspection(await make_property(seed.company_a), seed.users["inspector"])
    resp = await api.post(
        "/api/v1/contests/links", json={"inspection_id": pending.id}, headers=seed.headers("manager"),
    )
    assert resp.status_code == 400

    resp = await api.post(
        "/api/v1/contests/links", json={"inspection_id": inspection.id}, headers=seed.headers("admin_b"),
    )
    assert resp.status_code == 404


async def test_public_view_shows_inspection_and_company(api, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)

    resp = await api.get(f"/api/public/contest/{link['token']}")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["contest_link_id"] == link["id"]
    assert data["inspection"]["id"] == inspection.id
    assert data["inspection"]["property"]["id"] == inspection.property_id
    assert data["company"]["name"] == "Imobiliária Alfa"


async def test_link_is_single_use(api, db, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)
    url = f"/api/public/contest/{link['token']}"

    resp = await api.post(url, json=SUBMISSION)
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "pending"

    contest = await _contest_for(db, inspection)
    assert contest.created_via == "public_link"
    assert contest.created_by is None
    assert contest.contestant_email == "carlos@example.com"
    assert contest.contest_type == "technical"

    resp = await api.post(url, json=SUBMISSION)
    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"

    resp = await api.get(url)
    assert resp.status_code == 400

    async with db.session() as session:
        stored = (await session.execute(select(ContestLink))).scalars().one()
    assert stored.is_used is True
    assert stored.contest_id == contest.id


async def test_expired_or_unknown_link_rejected(api, db, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)
    async with db.session() as session:
        await session.execute(
            update(ContestLink).values(expires_at=utcnow() - timedelta(minutes=1))
        )

    resp = await api.post(f"/api/public/contest/{link['token']}", json=SUBMISSION)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Token inválido, expirado ou já utilizado"

    resp = await api.get("/api/public/contest/nao-existe-este-token-1234")
    assert resp.status_code == 400


async def test_submission_is_validated_before_the_link_is_spent(api, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)
    url = f"/api/public/contest/{link['token']}"

    resp = await api.post(url, json={**SUBMISSION, "description": "curta"})
    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "description"

    resp = await api.post(url, json=SUBMISSION)
    assert resp.status_code == 201


async def test_invalid_bearer_is_ignored(api, db, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)

    resp = await api.post(
        f"/api/public/contest/{link['token']}",
        json=SUBMISSION,
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert resp.status_code == 201
    assert (await _contest_for(db, inspection)).created_by is None


async def test_staff_token_is_recorded_as_submitter(api, db, seed, completed_inspection):
    own = await completed_inspection()
    foreign = await completed_inspection()
    own_link = await _issue(api, seed, own)
    foreign_link = await _issue(api, seed, foreign)

    resp = await api.post(
        f"/api/public/contest/{own_link['token']}", json=SUBMISSION, headers=seed.headers("manager"),
    )
    assert resp.status_code == 201
    assert (await _contest_for(db, own)).created_by == seed.users["manager"].id

    resp = await api.post(
        f"/api/public/contest/{foreign_link['token']}", json=SUBMISSION, headers=seed.headers("admin_b"),
    )
    assert resp.status_code == 201
    assert (await _contest_for(db, foreign)).created_by is None


async def test_open_contest_blocks_public_submission(api, db, seed, completed_inspection):
    inspection = await completed_inspection()
    link = await _issue(api, seed, inspection)
    await api.post(
        "/api/v1/contests",
        json={
            "inspection_id": inspection.id,
            "contestant_name": "Maria Oliveira",
            "contestant_email": "maria@example.com",
            "contest_type": "dano_nao_reconhecido",
            "description": "O dano no piso da sala já existia antes da locação.",
        },
        headers=seed.headers("manager"),
    )

    resp = await api.post(f"/api/public/contest/{link['token']}", json=SUBMISSION)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Já existe uma contestação aberta para esta vistoria"

    async with db.session() as session:
        stored = (await session.execute(select(ContestLink))).scalars().one()
    assert stored.is_used is False
