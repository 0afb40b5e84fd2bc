"""Client portal: registration, opaque sessions, profile and administration."""

from datetime import timedelta

from sqlalchemy import func, select, update

from grifo.domain import ClientSession
from grifo.domain.mixins import utcnow

REGISTRATION = {"name": "Ana Silva", "email": "ana@x.com", "password": "abcdef"}


async def _login(api, email="ana@x.com", password="abcdef") -> dict[str, str]:
    resp = await api.post("/api/v1/clients/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


async def _session_count(db) -> int:
    async with db.session() as session:
        return (await session.execute(select(func.count()).select_from(ClientSession))).scalar_one()


async def test_register_returns_client_without_password_hash(api):
    resp = await api.post("/api/v1/clients/register", json=REGISTRATION)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    client = body["data"]["client"]
    assert client["email"] == "ana@x.com"
    assert client["status"] == "active"
    assert "password_hash" not in client
    assert "password" not in client


async def test_register_duplicate_email_rejected(api):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    resp = await api.post("/api/v1/clients/register", json=REGISTRATION)

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"] == "Email já cadastrado"


async def test_register_email_is_case_insensitive(api):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    resp = await api.post("/api/v1/clients/register", json={**REGISTRATION, "email": "ANA@X.com"})
    assert resp.status_code == 400


async def test_register_rejects_short_password(api):
    resp = await api.post("/api/v1/clients/register", json={**REGISTRATION, "password": "abc"})

    assert resp.status_code == 400
    fields = [d["field"] for d in resp.json()["details"]]
    assert "password" in fields


async def test_login_wrong_password(api):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    resp = await api.post("/api/v1/clients/login", json={"email": "ana@x.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json()["error"] == "Credenciais inválidas"


async def test_profile_update_and_logout(api, db):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    headers = await _login(api)

    resp = await api.get("/api/v1/clients/profile", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["client"]["name"] == "Ana Silva"

    resp = await api.put("/api/v1/clients/profile", json={"city": "Curitiba"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["client"]["city"] == "Curitiba"

    resp = await api.post("/api/v1/clients/logout", headers=headers)
    assert resp.status_code == 200
    assert await _session_count(db) == 0

    resp = await api.get("/api/v1/clients/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Sessão inválida"


async def test_profile_requires_token(api):
    resp = await api.get("/api/v1/clients/profile")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token de acesso requerido"


async def test_expired_session_is_deleted(api, db):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    headers = await _login(api)
    async with db.session() as session:
        await session.execute(update(ClientSession).values(expires_at=utcnow() - timedelta(minutes=1)))

    resp = await api.get("/api/v1/clients/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Sessão expirada"
    assert await _session_count(db) == 0

    resp = await api.get("/api/v1/clients/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Sessão inválida"


async def test_deactivating_client_revokes_sessions(api, db, seed):
    created = await api.post("/api/v1/clients/register", json=REGISTRATION)
    client_id = created.json()["data"]["client"]["id"]
    client_headers = await _login(api)

    resp = await api.patch(
        f"/api/v1/clients/{client_id}/status",
        json={"status": "suspended"},
        headers=seed.headers("manager"),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["client"]["status"] == "suspended"
    assert await _session_count(db) == 0

    resp = await api.get("/api/v1/clients/profile", headers=client_headers)
    assert resp.status_code == 401

    resp = await api.post("/api/v1/clients/login", json={"email": "ana@x.com", "password": "abcdef"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Conta inativa"


async def test_client_administration_requires_manager(api, seed):
    await api.post("/api/v1/clients/register", json=REGISTRATION)

    resp = await api.get("/api/v1/clients", headers=seed.headers("inspector"))
    assert resp.status_code == 403

    resp = await api.get("/api/v1/clients", params={"search": "ana"}, headers=seed.headers("admin"))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["pagination"]["total"] == 1
    assert data["clients"][0]["email"] == "ana@x.com"


async def test_client_token_is_not_a_user_token(api):
    await api.post("/api/v1/clients/register", json=REGISTRATION)
    headers = await _login(api)

    resp = await api.get("/api/v1/properties", headers=headers)
    assert resp.status_code == 401
