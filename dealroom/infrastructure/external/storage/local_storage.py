"""Local filesystem storage with path validation and atomic writes."""

from __future__ import annotations

import hashlib
import os
import secrets
import tempfile
from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO

import aiofiles
import aiofiles.os

from dealroom.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StorageChecksumMismatchError,
    StorageDeleteError,
    StorageDownloadError,
    StorageException,
    StorageListError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)
from dealroom.shared.utils.datetime import utc_now

_TMP_PREFIX = ".tmp_"


class LocalStorageService:
    """Object storage on the local filesystem.

    Keys are validated against storage_root. Writes go to a temp file and are
    renamed into place. Signed URLs are backed by in-memory tokens served by
    the API's storage download route.
    """

    CHUNK_SIZE = 64 * 1024

    # token -> (storage_ref, expires_at); shared by every instance in the process
    _download_tokens: dict[str, tuple[str, datetime]] = {}

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all objects.
            base_url: Absolute API base for signed URLs (e.g. http://localhost:8000/api/v1).
        """
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, storage_ref: str) -> Path:
        """Resolve a key under storage_root. Raises StoragePermissionError on traversal."""
        full_path = (self.storage_root / storage_ref).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_ref, "path_validation") from e
        return full_path

    @staticmethod
    def _checksum(content: bytes) -> str:
        return hashlib.sha256(content).hexdigest()

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Write the object atomically. Existing keys are never overwritten."""
        try:
            target_path = self._get_full_path(storage_ref)
            if target_path.exists():
                async with aiofiles.open(target_path, "rb") as f:
                    existing = self._checksum(await f.read())
                if existing == expected_checksum:
                    return {
                        "storage_ref": storage_ref,
                        "checksum": existing,
                        "size": target_path.stat().st_size,
                    }
                raise StorageAlreadyExistsError(storage_ref)

            content = file_data.read()
            computed = self._checksum(content)
            if computed != expected_checksum:
                raise StorageChecksumMismatchError(storage_ref, expected_checksum, computed)

            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=_TMP_PREFIX)
            os.close(fd)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(content)
                os.chmod(temp_path, 0o640)
                os.replace(temp_path, target_path)
            finally:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
            return {"storage_ref": storage_ref, "checksum": computed, "size": len(content)}
        except StorageException:
            raise
        except Exception as e:
            raise StorageUploadError(storage_ref, str(e)) from e

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.is_file():
            raise StorageNotFoundError(storage_ref)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while chunk := await f.read(self.CHUNK_SIZE):
                    yield chunk
        except OSError as e:
            raise StorageDownloadError(storage_ref, str(e)) from e

    async def delete(self, storage_ref: str) -> bool:
        """Delete the object and prune empty folders. Returns True if deleted."""
        try:
            file_path = self._get_full_path(storage_ref)
            if not file_path.is_file():
                return False
            await aiofiles.os.remove(file_path)
            parent = file_path.parent
            while parent != self.storage_root:
                if any(parent.iterdir()):
                    break
                parent.rmdir()
                parent = parent.parent
            return True
        except StorageException:
            raise
        except Exception as e:
            raise StorageDeleteError(storage_ref, str(e)) from e

    async def exists(self, storage_ref: str) -> bool:
        try:
            return self._get_full_path(storage_ref).is_file()
        except StorageException:
            return False

    async def list_folder(
        self, folder: str, search: str | None = None, limit: int = 100
    ) -> list[str]:
        """Names of files directly inside folder, optionally filtered by name prefix."""
        folder_path = self._get_full_path(folder)
        if not folder_path.is_dir():
            return []
        try:
            entries = await aiofiles.os.listdir(folder_path)
        except OSError as e:
            raise StorageListError(folder, str(e)) from e
        names = sorted(
            name
            for name in entries
            if not name.startswith(_TMP_PREFIX)
            and (folder_path / name).is_file()
            and (not search or name.startswith(search))
        )
        return names[:limit]

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(minutes=5),
    ) -> str:
        """Return a token URL valid for expiration."""
        if not await self.exists(storage_ref):
            raise StorageNotFoundError(storage_ref)
        token = secrets.token_urlsafe(32)
        self._download_tokens[token] = (storage_ref, utc_now() + expiration)
        self._cleanup_expired_tokens()
        path = f"/storage/download/{token}"
        return f"{self.base_url}{path}" if self.base_url else path

    def _cleanup_expired_tokens(self) -> None:
        now = utc_now()
        for token in [t for t, (_, exp) in self._download_tokens.items() if exp <= now]:
            del self._download_tokens[token]

    def validate_download_token(self, token: str) -> str | None:
        """Return the storage_ref for a live token, else None."""
        entry = self._download_tokens.get(token)
        if entry is None:
            return None
        storage_ref, expires_at = entry
        if utc_now() > expires_at:
            del self._download_tokens[token]
            return None
        return storage_ref
