"""Object storage port. Implementations: LocalStorageService, S3StorageService."""

from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any, BinaryIO, Protocol


class IStorageService(Protocol):
    """Protocol for object storage backends (local, S3-compatible)."""

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Upload without overwriting. Idempotent if same checksum."""
        ...

    def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        ...

    async def delete(self, storage_ref: str) -> bool:
        """Delete file. Returns True if deleted, False if not found."""
        ...

    async def exists(self, storage_ref: str) -> bool:
        ...

    async def list_folder(
        self, folder: str, search: str | None = None, limit: int = 100
    ) -> list[str]:
        """Return names of objects directly inside folder, optionally prefix-filtered."""
        ...

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(minutes=5),
    ) -> str:
        """Return a temporary download URL (presigned for S3, token URL for local)."""
        ...
