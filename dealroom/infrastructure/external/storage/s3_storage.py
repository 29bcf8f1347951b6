"""S3-compatible object storage (AWS S3, MinIO, etc.) for deal documents."""

from __future__ import annotations

import asyncio
import hashlib
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any, BinaryIO

import boto3
from botocore.exceptions import ClientError

from dealroom.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StorageChecksumMismatchError,
    StorageDeleteError,
    StorageDownloadError,
    StorageException,
    StorageListError,
    StorageNotFoundError,
    StorageUploadError,
)


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3StorageService:
    """S3-compatible storage with presigned URLs.

    Uses boto3 (sync) via asyncio.to_thread. Objects are never overwritten:
    a second write to the same key succeeds only with identical content.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Create the S3 client.

        Args:
            bucket: Bucket holding every deal's documents.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 client (tests).
        """
        self.bucket = bucket
        if client is not None:
            self._client = client
            return
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            **extra,
        )

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Put the object unless the key is taken. Idempotent for identical content."""

        def _upload() -> dict[str, Any]:
            try:
                head = self._client.head_object(Bucket=self.bucket, Key=storage_ref)
            except ClientError as e:
                if _error_code(e) not in ("404", "NoSuchKey", "NotFound"):
                    raise
            else:
                existing = (head.get("Metadata") or {}).get("sha256")
                if existing == expected_checksum:
                    return {
                        "storage_ref": storage_ref,
                        "checksum": existing,
                        "size": head["ContentLength"],
                    }
                raise StorageAlreadyExistsError(storage_ref)

            file_data.seek(0)
            body = file_data.read()
            computed = hashlib.sha256(body).hexdigest()
            if computed != expected_checksum:
                raise StorageChecksumMismatchError(storage_ref, expected_checksum, computed)
            meta = {"sha256": computed}
            for key, value in (metadata or {}).items():
                meta[key.lower().replace("_", "-")] = value
            self._client.put_object(
                Bucket=self.bucket,
                Key=storage_ref,
                Body=body,
                ContentType=content_type,
                Metadata=meta,
            )
            return {"storage_ref": storage_ref, "checksum": computed, "size": len(body)}

        try:
            return await asyncio.to_thread(_upload)
        except StorageException:
            raise
        except Exception as e:
            raise StorageUploadError(storage_ref, str(e)) from e

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream object content."""

        def _get() -> bytes:
            resp = self._client.get_object(Bucket=self.bucket, Key=storage_ref)
            return resp["Body"].read()

        try:
            body = await asyncio.to_thread(_get)
        except ClientError as e:
            if _error_code(e) in ("404", "NoSuchKey"):
                raise StorageNotFoundError(storage_ref) from e
            raise StorageDownloadError(storage_ref, str(e)) from e
        for start in range(0, len(body), self.CHUNK_SIZE):
            yield body[start : start + self.CHUNK_SIZE]

    async def delete(self, storage_ref: str) -> bool:
        """Delete the object. Returns False if it was not there."""

        def _delete() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=storage_ref)
            except ClientError as e:
                if _error_code(e) in ("404", "NoSuchKey", "NotFound"):
                    return False
                raise
            self._client.delete_object(Bucket=self.bucket, Key=storage_ref)
            return True

        try:
            return await asyncio.to_thread(_delete)
        except Exception as e:
            raise StorageDeleteError(storage_ref, str(e)) from e

    async def exists(self, storage_ref: str) -> bool:
        def _exists() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=storage_ref)
                return True
            except ClientError:
                return False

        return await asyncio.to_thread(_exists)

    async def list_folder(
        self, folder: str, search: str | None = None, limit: int = 100
    ) -> list[str]:
        """Names of objects directly under folder whose name starts with search."""
        prefix = f"{folder.rstrip('/')}/"

        def _list() -> list[str]:
            resp = self._client.list_objects_v2(
                Bucket=self.bucket,
                Prefix=prefix + (search or ""),
                Delimiter="/",
                MaxKeys=limit,
            )
            return [
                item["Key"][len(prefix) :]
                for item in resp.get("Contents", [])
                if "/" not in item["Key"][len(prefix) :]
            ]

        try:
            return await asyncio.to_thread(_list)
        except Exception as e:
            raise StorageListError(folder, str(e)) from e

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(minutes=5),
    ) -> str:
        """Return a presigned GET URL."""

        def _presign() -> str:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": storage_ref},
                ExpiresIn=int(expiration.total_seconds()),
            )

        try:
            return await asyncio.to_thread(_presign)
        except Exception as e:
            raise StorageDownloadError(storage_ref, str(e)) from e
