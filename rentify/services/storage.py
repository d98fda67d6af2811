"""Blob storage for contract documents, backed by any S3-compatible bucket."""

import logging
import mimetypes
import re
import uuid
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from rentify.core.config import Settings
from rentify.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredObject:
    url: str
    storage_key: str


class BlobStorage(Protocol):
    def upload(
        self,
        data: bytes,
        folder: str,
        filename: str,
        content_type: str | None = None,
        key: str | None = None,
    ) -> StoredObject: ...

    def delete(self, storage_key: str) -> None: ...


def sanitize_filename(filename: str) -> str:
    name = (filename or "").strip()
    name = name.replace("\\", "").replace("/", "")
    name = re.sub(r"[^A-Za-z0-9._ -]+", "", name)
    name = re.sub(r"\s+", "_", name).strip("_")
    return name or f"file_{uuid.uuid4()}"


def build_object_key(folder: str, filename: str) -> str:
    """Unique key under ``folder`` that keeps the original name readable."""
    return f"{folder.strip('/')}/{uuid.uuid4()}--{sanitize_filename(filename)}"


class S3BlobStorage:
    """
    Store objects in an S3-compatible bucket (Cloudflare R2, AWS S3, MinIO).
    """

    def __init__(self, settings: Settings, client=None):
        required = {
            "STORAGE_ENDPOINT_URL": settings.storage_endpoint_url,
            "STORAGE_ACCESS_KEY_ID": settings.storage_access_key_id,
            "STORAGE_SECRET_ACCESS_KEY": settings.storage_secret_access_key,
            "STORAGE_BUCKET_NAME": settings.storage_bucket_name,
        }
        missing = [k for k, v in required.items() if not str(v or "").strip()]
        if missing and client is None:
            raise StorageError("Blob storage is not configured. Missing: " + ", ".join(missing))

        self.bucket_name = settings.storage_bucket_name
        self.endpoint_url = settings.storage_endpoint_url
        self.public_base_url = settings.storage_public_base_url
        if client is None:
            try:
                client = boto3.client(
                    "s3",
                    endpoint_url=settings.storage_endpoint_url,
                    aws_access_key_id=settings.storage_access_key_id,
                    aws_secret_access_key=settings.storage_secret_access_key,
                    config=Config(
                        signature_version="s3v4",
                        connect_timeout=5,
                        read_timeout=30,
                        retries={"max_attempts": 3, "mode": "standard"},
                    ),
                    region_name=settings.storage_region,
                )
            except (BotoCoreError, ValueError) as e:
                raise StorageError(f"Blob storage client could not be created: {e}") from e
        self.client = client

    def url_for(self, storage_key: str) -> str:
        quoted = quote(storage_key, safe="/._-")
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quoted}"
        return f"{(self.endpoint_url or '').rstrip('/')}/{self.bucket_name}/{quoted}"

    def upload(
        self,
        data: bytes,
        folder: str,
        filename: str,
        content_type: str | None = None,
        key: str | None = None,
    ) -> StoredObject:
        """
        Upload bytes and return where they can be fetched from.

        Args:
            data: Object body
            folder: Key prefix, used when ``key`` is not given
            filename: Original file name, kept in object metadata
            content_type: MIME type; guessed from the filename when omitted
            key: Full object key for deterministic objects (overwrites)
        """
        storage_key = key or build_object_key(folder, filename)
        if not content_type:
            content_type, _ = mimetypes.guess_type(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
                Metadata={"original_filename": quote(filename or "", safe=" ._()-")},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload {filename!r} to blob storage: {e}") from e

        logger.info("Stored %s (%d bytes)", storage_key, len(data))
        return StoredObject(url=self.url_for(storage_key), storage_key=storage_key)

    def delete(self, storage_key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=storage_key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete {storage_key!r} from blob storage: {e}") from e
