"""Uploads: object write plus metadata row, with compensating cleanup."""

import logging
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from grifo.domain import Upload
from grifo.repositories.upload import UploadRepository
from grifo.services import upload as upload_service

PHOTO = ("fachada.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpeg")
REPORT = ("laudo.pdf", b"%PDF-1.4 fake", "application/pdf")


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(upload_service, "CLEANUP_BACKOFF_SECONDS", 0)


async def _upload(api, headers, *files, upload_type="inspection_photos", **form):
    return await api.post(
        "/api/v1/uploads",
        files=[("files", f) for f in files],
        data={"upload_type": upload_type, **form},
        headers=headers,
    )


async def _upload_rows(db) -> int:
    async with db.session() as session:
        return (await session.execute(select(func.count()).select_from(Upload))).scalar_one()


async def test_upload_files(api, seed, storage):
    resp = await _upload(api, seed.headers("inspector"), PHOTO, REPORT, description="Vistoria de entrada")

    assert resp.status_code == 201
    files = resp.json()["data"]["files"]
    assert [f["original_name"] for f in files] == ["fachada.jpg", "laudo.pdf"]
    assert files[0]["uploader"]["id"] == seed.users["inspector"].id
    assert files[0]["file_size"] == len(PHOTO[1])
    assert files[0]["public_url"].startswith("https://files.test/")
    assert len(storage.objects) == 2
    assert all(key.startswith(f"{seed.company_a.id}/inspection_photos/") for key in storage.objects)


async def test_viewer_cannot_upload(api, seed, storage):
    resp = await _upload(api, seed.headers("viewer"), PHOTO)

    assert resp.status_code == 403
    assert storage.objects == {}


async def test_disallowed_mime_type(api, seed, storage):
    resp = await _upload(api, seed.headers("manager"), PHOTO, ("setup.exe", b"MZ", "application/x-msdownload"))

    assert resp.status_code == 400
    body = resp.json()
    assert body["details"][0]["field"] == "files.1"
    assert storage.objects == {}


async def test_oversized_file(api, app, seed, storage):
    app.state.settings.max_upload_size_mb = 1
    big = ("planta.pdf", b"0" * (1024 * 1024 + 1), "application/pdf")

    resp = await _upload(api, seed.headers("manager"), big)

    assert resp.status_code == 400
    assert "1MB" in resp.json()["details"][0]["message"]


async def test_metadata_failure_removes_written_objects(api, db, seed, storage, monkeypatch):
    async def broken(self, rows):
        raise OperationalError("INSERT INTO uploads", {}, Exception("disk I/O error"))

    monkeypatch.setattr(UploadRepository, "add_many", broken)

    resp = await _upload(api, seed.headers("manager"), PHOTO, REPORT)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Falha ao registrar arquivos enviados"
    assert storage.objects == {}
    assert storage.remove_calls == 1
    assert await _upload_rows(db) == 0


async def test_cleanup_is_retried(api, seed, storage, monkeypatch):
    async def broken(self, rows):
        raise OperationalError("INSERT INTO uploads", {}, Exception("disk I/O error"))

    monkeypatch.setattr(UploadRepository, "add_many", broken)
    storage.remove_failures = 2

    resp = await _upload(api, seed.headers("manager"), PHOTO)

    assert resp.status_code == 500
    assert storage.remove_calls == 3
    assert storage.objects == {}


async def test_failed_cleanup_is_logged(api, seed, storage, monkeypatch, caplog):
    async def broken(self, rows):
        raise OperationalError("INSERT INTO uploads", {}, Exception("disk I/O error"))

    monkeypatch.setattr(UploadRepository, "add_many", broken)
    storage.remove_failures = 10
    caplog.set_level(logging.WARNING, logger="grifo.services.upload")

    resp = await _upload(api, seed.headers("manager"), PHOTO)

    assert resp.status_code == 500
    assert len(storage.objects) == 1
    orphan = next(iter(storage.objects))
    assert any("orphaned objects" in r.getMessage() and orphan in r.getMessage() for r in caplog.records)


async def test_storage_failure_writes_no_metadata(api, db, seed, storage):
    storage.fail_put = True

    resp = await _upload(api, seed.headers("manager"), PHOTO)

    assert resp.status_code == 502
    assert resp.json()["code"] == "STORAGE_ERROR"
    assert await _upload_rows(db) == 0


async def test_unexpected_write_error_removes_earlier_objects(api, db, seed, storage, monkeypatch):
    calls = {"n": 0}

    def flaky_url(key):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("signer unavailable")
        return f"https://files.test/{key}"

    monkeypatch.setattr(storage, "public_url", flaky_url)

    resp = await _upload(api, seed.headers("manager"), PHOTO, REPORT)

    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_ERROR"
    assert storage.objects == {}
    assert storage.remove_calls == 1
    assert await _upload_rows(db) == 0


async def test_list_and_filter(api, seed):
    related = str(uuid.uuid4())
    await _upload(api, seed.headers("manager"), PHOTO, related_id=related)
    await _upload(api, seed.headers("manager"), REPORT, upload_type="property_documents")

    resp = await api.get("/api/v1/uploads", params={"related_id": related}, headers=seed.headers("viewer"))
    files = resp.json()["data"]["files"]
    assert [f["original_name"] for f in files] == ["fachada.jpg"]

    resp = await api.get("/api/v1/uploads", params={"search": "laudo"}, headers=seed.headers("viewer"))
    assert resp.json()["data"]["pagination"]["total"] == 1

    resp = await api.get("/api/v1/uploads", headers=seed.headers("admin_b"))
    assert resp.json()["data"]["pagination"]["total"] == 0


async def test_delete_own_upload_only(api, seed, storage):
    created = await _upload(api, seed.headers("inspector"), PHOTO)
    file_id = created.json()["data"]["files"][0]["id"]

    resp = await api.delete(f"/api/v1/uploads/{file_id}", headers=seed.headers("inspector2"))
    assert resp.status_code == 403

    resp = await api.delete(f"/api/v1/uploads/{file_id}", headers=seed.headers("inspector"))
    assert resp.status_code == 200
    assert storage.objects == {}

    resp = await api.get(f"/api/v1/uploads/{file_id}", headers=seed.headers("inspector"))
    assert resp.status_code == 404


async def test_bulk_delete_reports_missing_ids(api, seed, storage):
    created = await _upload(api, seed.headers("manager"), PHOTO, REPORT)
    ids = [f["id"] for f in created.json()["data"]["files"]]
    missing = str(uuid.uuid4())

    resp = await api.post(
        "/api/v1/uploads/bulk-delete", json={"file_ids": [*ids, missing]}, headers=seed.headers("manager"),
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["deleted_count"] == 2
    assert data["not_found"] == [missing]
    assert storage.objects == {}
