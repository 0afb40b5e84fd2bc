"""User login, tokens, user management and tenant administration."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from grifo.core.security import create_access_token
from grifo.domain import User

PASSWORD = "secret123"


async def test_login_returns_token_and_user(api, seed):
    resp = await api.post("/api/v1/auth/login", json={"email": "GERENTE@alfa.com", "password": PASSWORD})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["token_type"] == "Bearer"
    assert data["user"]["role"] == "manager"
    assert data["user"]["last_login"] is not None
    assert "password_hash" not in data["user"]

    me = await api.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["email"] == "gerente@alfa.com"


async def test_login_bad_credentials(api, seed):
    resp = await api.post("/api/v1/auth/login", json={"email": "gerente@alfa.com", "password": "wrong"})

    assert resp.status_code == 401
    assert resp.json()["code"] == "AUTHENTICATION_ERROR"


async def test_expired_token_rejected(api, seed, settings):
    user = seed.users["admin"]
    token = create_access_token(
        settings, user_id=user.id, role=user.role, company_id=user.company_id,
        now=datetime.now(timezone.utc) - timedelta(days=30),
    )

    resp = await api.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["error"] == "Token inválido ou expirado"


async def test_refresh_issues_new_token_for_active_user(api, seed):
    resp = await api.post("/api/v1/auth/refresh", headers=seed.headers("inspector"))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["id"] == seed.users["inspector"].id

    me = await api.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200


async def test_refresh_refused_for_inactive_user(api, db, seed):
    inspector = seed.users["inspector"]
    async with db.session() as session:
        await session.execute(update(User).where(User.id == inspector.id).values(status="inactive"))

    resp = await api.post("/api/v1/auth/refresh", headers=seed.headers("inspector"))

    assert resp.status_code == 401
    assert resp.json()["error"] == "Usuário inativo"

    resp = await api.post("/api/v1/auth/refresh")
    assert resp.status_code == 401


async def test_change_password(api, seed):
    headers = seed.headers("viewer")

    resp = await api.post(
        "/api/v1/auth/change-password",
        json={"current_password": "nope", "new_password": "novasenha"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = await api.post(
        "/api/v1/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "novasenha"},
        headers=headers,
    )
    assert resp.status_code == 200

    resp = await api.post("/api/v1/auth/login", json={"email": "leitor@alfa.com", "password": "novasenha"})
    assert resp.status_code == 200


async def test_admin_creates_user(api, seed):
    body = {"name": "Nova Inspetora", "email": "nova@alfa.com", "password": "abcdef", "role": "inspector"}

    resp = await api.post("/api/v1/users", json=body, headers=seed.headers("manager"))
    assert resp.status_code == 403

    resp = await api.post("/api/v1/users", json=body, headers=seed.headers("admin"))
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["company_id"] == seed.company_a.id

    resp = await api.post("/api/v1/users", json=body, headers=seed.headers("admin"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Email já cadastrado"


async def test_admin_cannot_grant_super_admin(api, seed):
    body = {"name": "Intrusa", "email": "x@alfa.com", "password": "abcdef", "role": "super_admin"}
    resp = await api.post("/api/v1/users", json=body, headers=seed.headers("admin"))
    assert resp.status_code == 400


async def test_role_change_requires_admin(api, seed):
    inspector = seed.users["inspector"]

    resp = await api.put(
        f"/api/v1/users/{inspector.id}", json={"role": "manager"}, headers=seed.headers("inspector"),
    )
    assert resp.status_code == 403

    resp = await api.put(
        f"/api/v1/users/{inspector.id}", json={"phone": "+55 11 99999-0000"}, headers=seed.headers("inspector"),
    )
    assert resp.status_code == 200

    resp = await api.put(f"/api/v1/users/{inspector.id}", json={"role": "manager"}, headers=seed.headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["role"] == "manager"


async def test_user_cannot_delete_self(api, seed):
    admin = seed.users["admin"]

    resp = await api.delete(f"/api/v1/users/{admin.id}", headers=seed.headers("admin"))
    assert resp.status_code == 403

    viewer = seed.users["viewer"]
    resp = await api.delete(f"/api/v1/users/{viewer.id}", headers=seed.headers("admin"))
    assert resp.status_code == 200

    resp = await api.get(f"/api/v1/users/{viewer.id}", headers=seed.headers("admin"))
    assert resp.status_code == 404


async def test_user_list_is_tenant_scoped(api, seed):
    resp = await api.get("/api/v1/users", params={"limit": 100}, headers=seed.headers("admin_b"))

    emails = [u["email"] for u in resp.json()["data"]["users"]]
    assert emails == ["admin@beta.com"]


async def test_company_plan_change_requires_super_admin(api, seed):
    url = f"/api/v1/companies/{seed.company_a.id}"

    resp = await api.put(url, json={"phone": "+55 11 3000-0000"}, headers=seed.headers("admin"))
    assert resp.status_code == 200

    resp = await api.put(url, json={"plan": "enterprise"}, headers=seed.headers("admin"))
    assert resp.status_code == 403

    resp = await api.put(url, json={"plan": "enterprise"}, headers=seed.headers("super_admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["company"]["plan"] == "enterprise"


async def test_other_company_not_visible(api, seed):
    resp = await api.get(f"/api/v1/companies/{seed.company_b.id}", headers=seed.headers("admin"))
    assert resp.status_code == 404


async def test_company_stats(api, seed):
    resp = await api.get(f"/api/v1/companies/{seed.company_a.id}/stats", headers=seed.headers("admin"))

    assert resp.status_code == 200
    users = resp.json()["data"]["users"]
    assert users["total"] == 6
    assert users["by_role"]["inspector"] == 2
