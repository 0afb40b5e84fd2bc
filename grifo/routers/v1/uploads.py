"""Upload routes (multipart in, metadata envelope out)."""

from datetime import date

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import Settings
from grifo.core.deps import get_settings, get_storage, get_tenant_principal
from grifo.core.pagination import PaginationParams, pagination_params
from grifo.core.response import ok, paginated
from grifo.core.security import Principal
from grifo.db.base import get_db
from grifo.schemas.common import UUID_PATTERN, IdPath
from grifo.schemas.upload import BulkDeleteRequest, UploadOut, UploadType
from grifo.services.storage import ObjectStorage
from grifo.services.upload import SORT_COLUMNS, IncomingFile, UploadService

router = APIRouter(prefix="/uploads", tags=["Uploads"])

upload_pagination = pagination_params(list(SORT_COLUMNS))


def _svc(
    session: AsyncSession,
    principal: Principal,
    storage: ObjectStorage,
    settings: Settings,
) -> UploadService:
    return UploadService(session, principal, storage, settings)


async def _read(upload: UploadFile, limit: int) -> IncomingFile:
    # One byte past the limit is enough to reject an oversized file.
    data = await upload.read(limit + 1)
    return IncomingFile(
        filename=upload.filename or "arquivo",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_files(
    files: list[UploadFile] = File(...),
    upload_type: UploadType = Form(...),
    related_id: str | None = Form(default=None, pattern=UUID_PATTERN),
    description: str | None = Form(default=None, max_length=500),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    incoming = [await _read(f, settings.max_upload_size_bytes) for f in files]
    uploads = await _svc(session, principal, storage, settings).upload_files(
        incoming, upload_type=upload_type, related_id=related_id, description=description,
    )
    return ok(
        {"files": [UploadOut.model_validate(u) for u in uploads]},
        f"{len(uploads)} arquivo(s) enviado(s) com sucesso",
    )


@router.get("")
async def list_uploads(
    upload_type: UploadType | None = Query(default=None),
    related_id: str | None = Query(default=None, pattern=UUID_PATTERN),
    mime_type: str | None = Query(default=None, max_length=100),
    uploaded_from: date | None = Query(default=None),
    uploaded_to: date | None = Query(default=None),
    pagination: PaginationParams = Depends(upload_pagination),
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    items, total = await _svc(session, principal, storage, settings).list_uploads(
        pagination,
        upload_type=upload_type,
        related_id=related_id,
        mime_type=mime_type,
        uploaded_from=uploaded_from,
        uploaded_to=uploaded_to,
    )
    return paginated("files", [UploadOut.model_validate(u) for u in items], total, pagination)


@router.post("/bulk-delete")
async def bulk_delete(
    body: BulkDeleteRequest,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    result = await _svc(session, principal, storage, settings).bulk_delete(body.file_ids)
    return ok(result, f"{result['deleted_count']} arquivo(s) excluído(s)")


@router.get("/{upload_id}")
async def get_upload(
    upload_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    upload = await _svc(session, principal, storage, settings).get_upload(upload_id)
    return ok({"file": UploadOut.model_validate(upload)})


@router.delete("/{upload_id}")
async def delete_upload(
    upload_id: IdPath,
    principal: Principal = Depends(get_tenant_principal),
    session: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    await _svc(session, principal, storage, settings).delete_upload(upload_id)
    return ok(message="Arquivo excluído com sucesso")
