"""Object storage backends for uploaded files.

The upload service only talks to ``ObjectStorage``; which backend is used is
decided once, by ``build_storage`` at application start.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from grifo.core.config import Settings
from grifo.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    async def put(self, key: str, data: bytes, content_type: str) -> None: ...

    async def remove(self, keys: Iterable[str]) -> None:
        """Delete objects; deleting a key that does not exist is not an error."""
        ...

    def public_url(self, key: str) -> str: ...


class S3Storage:
    """S3 bucket backend. boto3 is blocking, so every call runs in a worker thread."""

    def __init__(self, bucket: str, *, region: str, access_key_id: str | None, secret_access_key: str | None):
        self.bucket = bucket
        self.region = region
        self._client = boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 put failed for %s: %s", key, exc)
            raise StorageError("Falha ao enviar arquivo para o armazenamento") from exc

    async def remove(self, keys: Iterable[str]) -> None:
        objects = [{"Key": key} for key in keys]
        if not objects:
            return
        try:
            response = await asyncio.to_thread(
                self._client.delete_objects,
                Bucket=self.bucket, Delete={"Objects": objects, "Quiet": True},
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 delete failed for %d object(s): %s", len(objects), exc)
            raise StorageError("Falha ao remover arquivo do armazenamento") from exc
        errors = response.get("Errors") or []
        if errors:
            raise StorageError(f"Falha ao remover {len(errors)} arquivo(s) do armazenamento")

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


class LocalStorage:
    """Directory on disk; used for development."""

    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError("Caminho de armazenamento inválido")
        return path

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)

        def write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(write)
        except OSError as exc:
            logger.error("Local storage write failed for %s: %s", key, exc)
            raise StorageError("Falha ao enviar arquivo para o armazenamento") from exc

    async def remove(self, keys: Iterable[str]) -> None:
        paths = [self._path(key) for key in keys]

        def unlink_all() -> None:
            for path in paths:
                path.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(unlink_all)
        except OSError as exc:
            logger.error("Local storage delete failed: %s", exc)
            raise StorageError("Falha ao remover arquivo do armazenamento") from exc

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("STORAGE_BACKEND=s3 requires S3_BUCKET")
        logger.info("Using S3 storage bucket %s (%s)", settings.s3_bucket, settings.aws_region)
        return S3Storage(
            settings.s3_bucket,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    logger.info("Using local storage at %s", settings.storage_local_path)
    return LocalStorage(settings.storage_local_path, settings.storage_public_base_url)
