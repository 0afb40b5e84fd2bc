"""Shared fixtures: app over a temporary SQLite file, fake object storage, seeded tenants.

Invariants:
    - Every test gets a fresh database file and a fresh app instance
    - Object storage is an in-memory fake; failures are switched on per test
    - Tokens are minted directly; login is covered by its own tests
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from grifo.core.config import Settings
from grifo.core.exceptions import StorageError
from grifo.core.security import create_access_token, hash_password
from grifo.domain import Company, Inspection, Property, User
from grifo.domain.mixins import utcnow
from grifo.main import create_app

PASSWORD = "secret123"


class FakeStorage:
    """In-memory ObjectStorage with switchable failures."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_put = False
        self.remove_failures = 0
        self.remove_calls = 0

    async def put(self, key, data, content_type):
        if self.fail_put:
            raise StorageError("Falha ao enviar arquivo para o armazenamento")
        self.objects[key] = data

    async def remove(self, keys):
        self.remove_calls += 1
        if self.remove_failures:
            self.remove_failures -= 1
            raise StorageError("Falha ao remover arquivo do armazenamento")
        for key in keys:
            self.objects.pop(key, None)

    def public_url(self, key):
        return f"https://files.test/{key}"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET="test-secret",
        AUDIT_ENABLED=False,
        STORAGE_LOCAL_PATH=str(tmp_path / "uploads"),
        app_env="test",
    )


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.db.create_all()
    application.state.storage = FakeStorage()
    yield application
    await application.state.db.dispose()


@pytest.fixture
def storage(app) -> FakeStorage:
    return app.state.storage


@pytest.fixture
def db(app):
    return app.state.db


@pytest.fixture
async def api(app):
    """HTTP client against the real app; unhandled errors come back as 500 responses."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def add(db, *rows):
    async with db.session() as session:
        session.add_all(rows)
    return rows[0] if len(rows) == 1 else rows


@pytest.fixture
async def seed(db, settings):
    """Two tenants. Company A has one user per role; company B has an admin."""
    company_a = Company(name="Imobiliária Alfa", email="contato@alfa.com", cnpj="11.111.111/0001-11")
    company_b = Company(name="Imobiliária Beta", email="contato@beta.com", cnpj="22.222.222/0001-22")
    await add(db, company_a, company_b)

    password_hash = hash_password(PASSWORD)

    def user(company, role, name):
        return User(
            company_id=company.id,
            email=f"{name}@{company.email.split('@')[1]}",
            name=name.title(),
            role=role,
            status="active",
            password_hash=password_hash,
        )

    users = {
        "super_admin": user(company_a, "super_admin", "root"),
        "admin": user(company_a, "admin", "admin"),
        "manager": user(company_a, "manager", "gerente"),
        "inspector": user(company_a, "inspector", "inspetor"),
        "inspector2": user(company_a, "inspector", "inspetora"),
        "viewer": user(company_a, "viewer", "leitor"),
        "admin_b": user(company_b, "admin", "admin"),
    }
    await add(db, *users.values())

    def headers(key: str) -> dict[str, str]:
        u = users[key]
        token = create_access_token(
            settings, user_id=u.id, role=u.role, company_id=u.company_id, email=u.email, name=u.name,
        )
        return {"Authorization": f"Bearer {token}"}

    return SimpleNamespace(company_a=company_a, company_b=company_b, users=users, headers=headers)


@pytest.fixture
def make_property(db):
    counter = {"n": 0}

    async def factory(company, **overrides):
        counter["n"] += 1
        fields = {
            "company_id": company.id,
            "address": f"Rua Principal, {counter['n']}",
            "zip_code": "01310-100",
            "city": "São Paulo",
            "state": "SP",
            "property_type": "apartment",
            "status": "active",
        }
        fields.update(overrides)
        return await add(db, Property(**fields))

    return factory


@pytest.fixture
def make_inspection(db):
    async def factory(prop, inspector, **overrides):
        fields = {
            "company_id": prop.company_id,
            "property_id": prop.id,
            "inspector_id": inspector.id,
            "inspection_type": "entrada",
            "scheduled_date": utcnow() + timedelta(days=3),
            "status": "pending",
        }
        fields.update(overrides)
        return await add(db, Inspection(**fields))

    return factory
