"""Document use cases: store, upload queue, downloads, deletion, reconciliation, views."""

from dealroom.application.use_cases.documents.access import (
    AccessGate,
    DocumentAccessPolicy,
    allow_all,
    nda_gate,
)
from dealroom.application.use_cases.documents.deletion import DeletionCoordinator
from dealroom.application.use_cases.documents.document_store import DocumentStore
from dealroom.application.use_cases.documents.download import (
    DirectoryTarget,
    DownloadBroker,
    DownloadTarget,
    MemoryTarget,
)
from dealroom.application.use_cases.documents.existence import ExistenceVerifier
from dealroom.application.use_cases.documents.export import DocumentExporter
from dealroom.application.use_cases.documents.reconciliation import ReconciliationStream
from dealroom.application.use_cases.documents.upload_queue import (
    UploadQueueManager,
    validate_file,
)
from dealroom.application.use_cases.documents.views import (
    CategoryCard,
    CategoryView,
    DocumentRow,
    FlatListView,
    StatusPanel,
    StatusSummary,
)

__all__ = [
    "AccessGate",
    "CategoryCard",
    "CategoryView",
    "DeletionCoordinator",
    "DirectoryTarget",
    "DocumentAccessPolicy",
    "DocumentExporter",
    "DocumentRow",
    "DocumentStore",
    "DownloadBroker",
    "DownloadTarget",
    "ExistenceVerifier",
    "FlatListView",
    "MemoryTarget",
    "ReconciliationStream",
    "StatusPanel",
    "StatusSummary",
    "UploadQueueManager",
    "allow_all",
    "nda_gate",
    "validate_file",
]
