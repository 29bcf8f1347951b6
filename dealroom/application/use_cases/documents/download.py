"""Download broker: existence-checked signed URLs and local saves.

Every download goes gate -> existence check -> short-lived signed URL ->
HTTP fetch -> target. A missing object is reported as not found without
requesting a URL for it.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import Protocol

import aiofiles
import httpx

from dealroom.application.dtos.document import DocumentResult
from dealroom.application.dtos.upload import DownloadedFile
from dealroom.application.interfaces.storage import IStorageService
from dealroom.application.notifications import (
    LoggingNotifier,
    Notifier,
    failure,
    success,
)
from dealroom.application.use_cases.documents.access import AccessGate, allow_all
from dealroom.application.use_cases.documents.existence import ExistenceVerifier
from dealroom.core.config import Settings, get_settings
from dealroom.domain.exceptions import (
    AccessDeniedException,
    DealRoomException,
    DocumentNotFoundException,
    DownloadFailedError,
    ValidationException,
)
from dealroom.domain.result import Result
from dealroom.shared.telemetry.tracing import add_span_attributes, traced
from dealroom.shared.utils.files import sanitize_filename

logger = logging.getLogger(__name__)


class DownloadTarget(Protocol):
    async def save(self, name: str, content: bytes) -> str:
        """Store the bytes and return where they went."""


class DirectoryTarget:
    """Saves downloads into a local directory (the user's device)."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    async def save(self, name: str, content: bytes) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / sanitize_filename(name)
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)
        return os.fspath(path)


class MemoryTarget:
    """Keeps downloaded bytes in memory, keyed by name."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    async def save(self, name: str, content: bytes) -> str:
        self.files[name] = content
        return name


class DownloadBroker:
    """Hands out signed URLs and downloads documents that really exist."""

    def __init__(
        self,
        storage: IStorageService,
        *,
        verifier: ExistenceVerifier | None = None,
        http_client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
        access_gate: AccessGate = allow_all,
        notifier: Notifier | None = None,
    ) -> None:
        self.storage = storage
        self.verifier = verifier or ExistenceVerifier(storage)
        self.http_client = http_client
        self.settings = settings or get_settings()
        self.access_gate = access_gate
        self.notifier = notifier or LoggingNotifier()

    async def _checked_url(self, document: DocumentResult, ttl_seconds: int) -> str:
        add_span_attributes(document_id=document.id, object_key=document.object_key)
        if not self.access_gate(document):
            raise AccessDeniedException(document.name)
        if not await self.verifier.exists(document.object_key):
            raise DocumentNotFoundException(document.name, document.object_key)
        return await self.storage.generate_download_url(
            document.object_key, expiration=timedelta(seconds=ttl_seconds)
        )

    @traced("download.download_url")
    async def download_url(self, document: DocumentResult) -> Result[str]:
        """Signed download URL (short TTL) for a document that exists."""
        try:
            url = await self._checked_url(document, self.settings.download_url_ttl_seconds)
        except DealRoomException as e:
            return Result.failure(e)
        return Result.success(url)

    @traced("download.preview_url")
    async def preview_url(self, document: DocumentResult) -> Result[str]:
        """Signed preview URL (long TTL). Only images and PDFs can be previewed."""
        if not document.is_previewable:
            return Result.failure(
                ValidationException(
                    f"Preview not available for {document.mime_type or 'this file type'}",
                    field="mime_type",
                )
            )
        try:
            url = await self._checked_url(document, self.settings.preview_url_ttl_seconds)
        except DealRoomException as e:
            return Result.failure(e)
        return Result.success(url)

    async def fetch(self, document: DocumentResult) -> bytes:
        """Gate, check, sign, and fetch the document's bytes.

        Raises:
            AccessDeniedException, DocumentNotFoundException, DownloadFailedError.
        """
        url = await self._checked_url(document, self.settings.download_url_ttl_seconds)
        try:
            if self.http_client is not None:
                response = await self.http_client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.settings.download_timeout_seconds
                ) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            raise DownloadFailedError(document.name, reason=str(e)) from e
        if response.is_error:
            raise DownloadFailedError(document.name, status_code=response.status_code)
        return response.content

    @traced("download.download")
    async def download(
        self, document: DocumentResult, target: DownloadTarget
    ) -> Result[DownloadedFile]:
        """Fetch a document and hand it to target."""
        try:
            content = await self.fetch(document)
        except DocumentNotFoundException as e:
            self.notifier.notify(failure("File Not Found", e.message))
            return Result.failure(e)
        except DealRoomException as e:
            self.notifier.notify(failure("Download Failed", e.message))
            logger.warning("Download of %s failed: %s", document.id, e.message)
            return Result.failure(e)

        try:
            location = await target.save(document.name, content)
        except OSError as e:
            error = DownloadFailedError(document.name, reason=str(e))
            self.notifier.notify(failure("Download Failed", error.message))
            logger.warning("Saving download of %s failed: %s", document.id, e)
            return Result.failure(error)
        self.notifier.notify(success("Success", f"{document.name} downloaded successfully"))
        return Result.success(
            DownloadedFile(name=document.name, location=location, size=len(content))
        )
