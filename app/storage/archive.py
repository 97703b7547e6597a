"""MinIO-backed archive for uploaded contracts and summary artifacts."""

from __future__ import annotations

import io
import json
import logging
import mimetypes
from typing import Mapping
from urllib.parse import urlparse

from minio import Minio

from app.core.config import Settings
from app.schemas.domain import ContractSummary

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Wraps underlying storage exceptions with operation context."""

    def __init__(self, op: str, bucket: str | None, key: str | None, message: str):
        self.op = op
        self.bucket = bucket
        self.key = key
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f"{self.op} failed for bucket={self.bucket or '<unknown>'} key={self.key or '<unknown>'}: {self.message}"


def _normalize_endpoint(endpoint: str) -> tuple[str, bool]:
    """Split an endpoint URL into host:port and a secure flag."""
    if "://" not in endpoint:
        # Bare "host:port" would otherwise parse "host" as the scheme
        return endpoint.rstrip("/"), False
    parsed = urlparse(endpoint)
    host = parsed.netloc or parsed.path.rstrip("/")
    return host, parsed.scheme == "https"


def upload_key(document_id: str, filename: str | None, content_type: str) -> str:
    """Object key for an uploaded contract, keeping the original extension."""
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[1].lower()
    else:
        ext = mimetypes.guess_extension(content_type) or ""
    return f"{document_id}{ext}"


class ContractArchive:
    """Stores raw uploads and the JSON summary artifact per document."""

    def __init__(self, client: Minio, *, uploads_bucket: str, summaries_bucket: str):
        self._client = client
        self.uploads_bucket = uploads_bucket
        self.summaries_bucket = summaries_bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContractArchive":
        host, secure = _normalize_endpoint(settings.S3_ENDPOINT)
        client = Minio(
            host,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
            secure=secure,
        )
        return cls(
            client,
            uploads_bucket=settings.S3_BUCKET_UPLOADS,
            summaries_bucket=settings.S3_BUCKET_SUMMARIES,
        )

    def _put(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        try:
            # MinIO requires a file-like object with read() method
            self._client.put_object(
                bucket_name=bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
                metadata=dict(metadata) if metadata else None,
            )
        except Exception as exc:
            raise StorageError("put", bucket, key, str(exc)) from exc
        return f"{bucket}/{key}"

    def ensure_buckets(self) -> None:
        for name in (self.uploads_bucket, self.summaries_bucket):
            try:
                if not self._client.bucket_exists(name):
                    self._client.make_bucket(name)
            except Exception as exc:
                raise StorageError("ensure_bucket", name, None, str(exc)) from exc

    def ping(self) -> None:
        """Raise StorageError when the uploads bucket cannot be reached."""
        try:
            self._client.bucket_exists(self.uploads_bucket)
        except Exception as exc:
            raise StorageError("ping", self.uploads_bucket, None, str(exc)) from exc

    def store_upload(
        self,
        document_id: str,
        data: bytes,
        *,
        content_type: str,
        filename: str | None = None,
    ) -> str:
        """Archive the uploaded file. Returns the object key."""
        key = upload_key(document_id, filename, content_type)
        self._put(
            self.uploads_bucket,
            key,
            data,
            content_type=content_type,
            metadata={"filename": filename} if filename else None,
        )
        logger.info("Archived upload %s/%s (%d bytes)", self.uploads_bucket, key, len(data))
        return key

    def store_summary(self, summary: ContractSummary) -> str:
        """Write the summary JSON artifact, overwriting any previous one."""
        key = f"{summary.document_id}.json"
        payload = json.dumps(summary.model_dump(mode="json", by_alias=True), indent=2).encode("utf-8")
        self._put(self.summaries_bucket, key, payload, content_type="application/json")
        return key


__all__ = ["ContractArchive", "StorageError", "upload_key"]
