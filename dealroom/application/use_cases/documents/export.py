"""Bulk export: download every document of a deal into one ZIP archive.

Documents are fetched one after another. A document that cannot be fetched
is recorded in the summary and skipped.
"""

from __future__ import annotations

import asyncio
import logging
import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path

from dealroom.application.dtos.document import DocumentResult
from dealroom.application.dtos.upload import ExportSummary
from dealroom.application.use_cases.documents.download import DownloadBroker
from dealroom.domain.exceptions import DealRoomException
from dealroom.shared.telemetry.tracing import traced
from dealroom.shared.utils.files import sanitize_filename

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _write_archive(path: Path, files: list[tuple[str, bytes]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for arcname, content in files:
            archive.writestr(arcname, content)


class DocumentExporter:
    def __init__(self, broker: DownloadBroker) -> None:
        self.broker = broker

    @traced("export.export_zip")
    async def export_zip(
        self,
        documents: Sequence[DocumentResult],
        archive_path: str | Path,
        on_progress: ProgressCallback | None = None,
    ) -> ExportSummary:
        """Write the documents into archive_path as ``{category}/{name}`` entries."""
        path = Path(archive_path)
        files: list[tuple[str, bytes]] = []
        seen: set[str] = set()
        errors: dict[str, str] = {}

        for index, document in enumerate(documents, start=1):
            try:
                content = await self.broker.fetch(document)
            except DealRoomException as e:
                errors[document.id] = e.message
                logger.warning("Export skipped %s: %s", document.id, e.message)
            else:
                arcname = f"{document.category}/{sanitize_filename(document.name)}"
                if arcname in seen:
                    arcname = f"{document.category}/{document.id}-{sanitize_filename(document.name)}"
                seen.add(arcname)
                files.append((arcname, content))
            if on_progress is not None:
                on_progress(index, len(documents))

        await asyncio.to_thread(_write_archive, path, files)
        return ExportSummary(
            total=len(documents),
            exported=len(files),
            failed=len(errors),
            archive_path=str(path),
            errors=errors,
        )
