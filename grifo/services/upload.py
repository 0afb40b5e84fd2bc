"""File uploads: object write, then metadata row, with compensating cleanup.

The two writes are not atomic. When the metadata insert fails, every object
written by the request is removed again; removal is idempotent and retried,
and a cleanup that still fails is logged as a warning with the orphaned keys.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from pathlib import PurePath

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.exceptions import AppException, NotFoundError, ValidationError
from grifo.core.pagination import PaginationParams
from grifo.core.permissions import require, tenant_scope
from grifo.core.security import Principal
from grifo.domain.upload import Upload
from grifo.repositories.upload import UploadRepository
from grifo.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "text/csv",
})

CLEANUP_ATTEMPTS = 3
CLEANUP_BACKOFF_SECONDS = 0.2

SORT_COLUMNS = {
    "created_at": Upload.created_at,
    "original_name": Upload.original_name,
    "filename": Upload.filename,
    "file_size": Upload.file_size,
}

SEARCH_COLUMNS = (Upload.original_name, Upload.description)


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


def storage_key(company_id: str, upload_type: str, original_name: str) -> str:
    ext = PurePath(original_name).suffix.lower()[:10]
    return f"{company_id}/{upload_type}/{uuid.uuid4()}{ext}"


class UploadService:
    def __init__(
        self,
        session: AsyncSession,
        principal: Principal,
        storage: ObjectStorage,
        settings: Settings,
    ):
        self._session = session
        self._principal = principal
        self._storage = storage
        self._settings = settings
        self._repo = UploadRepository(session, tenant_scope(principal))

    # ------------------------------------------------------------------
    # Upload saga
    # ------------------------------------------------------------------

    def _check(self, files: list[IncomingFile]) -> None:
        if not files:
            raise ValidationError("Nenhum arquivo enviado")
        if len(files) > self._settings.max_upload_files:
            raise ValidationError(f"Máximo de {self._settings.max_upload_files} arquivos por envio")
        problems = []
        for index, f in enumerate(files):
            if f.content_type not in ALLOWED_MIME_TYPES:
                problems.append({"field": f"files.{index}", "message": f"Tipo de arquivo não permitido: {f.content_type}"})
            elif len(f.data) > self._settings.max_upload_size_bytes:
                problems.append({
                    "field": f"files.{index}",
                    "message": f"Arquivo excede {self._settings.max_upload_size_mb}MB: {f.filename}",
                })
            elif not f.data:
                problems.append({"field": f"files.{index}", "message": f"Arquivo vazio: {f.filename}"})
        if problems:
            raise ValidationError("Arquivos inválidos", details=problems)

    async def _cleanup(self, keys: list[str]) -> bool:
        """Remove objects written by a failed request; True once storage confirms."""
        if not keys:
            return True
        for attempt in range(1, CLEANUP_ATTEMPTS + 1):
            try:
                await self._storage.remove(keys)
                logger.info("Cleaned up %d object(s) after failed upload", len(keys))
                return True
            except Exception as exc:
                logger.info("Cleanup attempt %d/%d failed: %s", attempt, CLEANUP_ATTEMPTS, exc)
                if attempt < CLEANUP_ATTEMPTS:
                    await asyncio.sleep(CLEANUP_BACKOFF_SECONDS * attempt)
        logger.warning("Upload cleanup failed; orphaned objects: %s", keys)
        return False

    async def upload_files(
        self,
        files: list[IncomingFile],
        *,
        upload_type: str,
        related_id: str | None = None,
        description: str | None = None,
    ) -> list[Upload]:
        require(self._principal, "upload", "create")
        self._check(files)
        company_id = self._principal.company_id

        written: list[str] = []
        rows: list[dict] = []
        try:
            for f in files:
                key = storage_key(company_id, upload_type, f.filename)
                await self._storage.put(key, f.data, f.content_type)
                written.append(key)
                rows.append({
                    "filename": PurePath(key).name,
                    "original_name": f.filename,
                    "file_size": len(f.data),
                    "mime_type": f.content_type,
                    "storage_path": key,
                    "public_url": self._storage.public_url(key),
                    "upload_type": upload_type,
                    "related_id": related_id,
                    "description": description,
                    "uploaded_by": self._principal.id,
                    "company_id": company_id,
                })
        except Exception:
            await self._cleanup(written)
            raise

        try:
            uploads = await self._repo.add_many(rows)
        except Exception as exc:
            logger.error("Metadata write failed for %d uploaded file(s): %s", len(rows), exc)
            await self._cleanup(written)
            raise AppException("Falha ao registrar arquivos enviados") from exc

        logger.info(
            "User %s uploaded %d file(s) as %s (company %s)",
            self._principal.id, len(uploads), upload_type, company_id,
        )
        return [await self._repo.get_by_id(u.id, refresh=True) for u in uploads]

    # ------------------------------------------------------------------
    # Read / delete
    # ------------------------------------------------------------------

    async def list_uploads(
        self,
        pagination: PaginationParams,
        *,
        upload_type: str | None = None,
        related_id: str | None = None,
        mime_type: str | None = None,
        uploaded_from: date | None = None,
        uploaded_to: date | None = None,
    ):
        query = (
            self._repo.list_query(sort_columns=SORT_COLUMNS, search_columns=SEARCH_COLUMNS)
            .equals(upload_type=upload_type, related_id=related_id, mime_type=mime_type)
            .between(Upload.created_at, uploaded_from, uploaded_to)
        )
        return await query.fetch(self._session, pagination)

    async def get_upload(self, upload_id: str) -> Upload:
        upload = await self._repo.get_by_id(upload_id)
        if upload is None:
            raise NotFoundError("Arquivo")
        return upload

    async def _remove_objects(self, keys: list[str]) -> None:
        try:
            await self._storage.remove(keys)
        except Exception as exc:
            logger.warning("Storage delete failed for %s: %s; removing metadata anyway", keys, exc)

    async def delete_upload(self, upload_id: str) -> None:
        upload = await self.get_upload(upload_id)
        require(self._principal, "upload", "delete", upload)
        await self._remove_objects([upload.storage_path])
        await self._repo.hard_delete(upload.id)
        logger.info("Upload %s deleted by %s", upload.id, self._principal.id)

    async def bulk_delete(self, ids: list[str]) -> dict:
        require(self._principal, "upload", "bulk_delete")
        uploads = await self._repo.get_many(ids)
        found = {u.id for u in uploads}
        await self._remove_objects([u.storage_path for u in uploads])
        deleted = await self._repo.delete_many(list(found))
        logger.info("Bulk delete by %s removed %d upload(s)", self._principal.id, deleted)
        return {
            "deleted_count": deleted,
            "not_found": [i for i in ids if i not in found],
        }
