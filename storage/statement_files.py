from __future__ import annotations

import logging
import os
import re
import time
from typing import Optional, Protocol

from settings.config import settings
from storage.artifact_storage import LocalArtifactStorage
from storage.s3_client import S3Client

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


class StatementFileStore(Protocol):
    async def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        """Store the bytes and return a URL for them."""
        ...


class S3StatementFileStore:
    def __init__(self, bucket: Optional[str] = None, client: Optional[S3Client] = None) -> None:
        self.bucket = bucket or settings.AWS_S3_BUCKET_NAME
        self.client = client or S3Client()

    async def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        await self.client.put_bytes(self.bucket, key, data, content_type=content_type)
        return self.client.public_url(self.bucket, key)


def statement_file_key(bank_account_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Object key "<bank_account_id>/<epoch_ms>_<filename>" for an uploaded statement."""
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    name = UNSAFE_FILENAME_RE.sub("_", os.path.basename(filename or "")) or "statement.pdf"
    return f"{bank_account_id}/{ts}_{name}"


def get_statement_file_store() -> StatementFileStore:
    backend = (settings.STATEMENT_STORAGE_BACKEND or "local").lower()
    if backend == "s3":
        return S3StatementFileStore()
    if backend != "local":
        logger.warning(f"Unknown storage backend {backend!r}, using local filesystem")
    return LocalArtifactStorage()
