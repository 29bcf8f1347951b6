"""Object storage: local filesystem and S3-compatible backends.

The S3 backend is imported lazily so boto3 is only needed when it is
selected (``pip install 'dealroom[s3]'``).
"""

from dealroom.infrastructure.external.storage.factory import StorageFactory
from dealroom.infrastructure.external.storage.local_storage import LocalStorageService

__all__ = ["LocalStorageService", "StorageFactory"]
