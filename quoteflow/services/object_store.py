# quoteflow/services/object_store.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from quoteflow.core.config import Settings
from quoteflow.core.errors import DeleteError, UploadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    url: str
    id: str


@dataclass(frozen=True)
class ImageUpload:
    """An image received with a request, not yet stored."""
    data: bytes
    filename: str
    content_type: str = "application/octet-stream"
    description: Optional[str] = None


class ObjectStore(Protocol):
    def upload(self, data: bytes, *, folder: str, filename: str, content_type: str) -> StoredObject: ...

    def delete(self, object_id: str) -> None: ...


def _normalize_endpoint(url: Optional[str]) -> Optional[str]:
    if not url:
        return url
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return f"http://{url}"


class S3ObjectStore:
    """
    S3 / MinIO bucket. Object id is the key; url is public_base_url/key
    (or the virtual-hosted S3 url when no public base is configured).
    """

    def __init__(self, client: Any, *, bucket: str, public_base_url: Optional[str] = None, region: str = ""):
        self._s3 = client
        self._bucket = bucket
        self._public_base = (public_base_url or "").rstrip("/")
        self._region = region

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        session = boto3.session.Session(
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
        )
        client = session.client(
            "s3",
            endpoint_url=_normalize_endpoint(settings.s3_endpoint_url),
            config=Config(signature_version="s3v4"),
        )
        return cls(
            client,
            bucket=settings.s3_bucket,
            public_base_url=settings.s3_public_base_url,
            region=settings.s3_region,
        )

    def _url_for(self, key: str) -> str:
        if self._public_base:
            return f"{self._public_base}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    def upload(self, data: bytes, *, folder: str, filename: str, content_type: str) -> StoredObject:
        suffix = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}.{suffix}"
        try:
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as exc:
            raise UploadError(f"Failed to upload image: {exc}") from exc
        logger.info("[store] uploaded key=%s bytes=%s", key, len(data))
        return StoredObject(url=self._url_for(key), id=key)

    def delete(self, object_id: str) -> None:
        try:
            self._s3.delete_object(Bucket=self._bucket, Key=object_id)
        except (ClientError, BotoCoreError) as exc:
            raise DeleteError(f"Failed to delete image {object_id}: {exc}") from exc
        logger.info("[store] deleted key=%s", object_id)
