"""Storage service factory: creates the local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dealroom.application.interfaces.storage import IStorageService
    from dealroom.core.config import Settings


class StorageFactory:
    """Builds storage service instances based on configuration."""

    @staticmethod
    def create_storage_service(settings: Settings | None = None) -> IStorageService:
        """Create the configured storage backend.

        Args:
            settings: Application settings; if None, uses get_settings().

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from dealroom.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()

        if backend == "local":
            from dealroom.infrastructure.external.storage.local_storage import (
                LocalStorageService,
            )

            return LocalStorageService(
                storage_root=s.storage_root,
                base_url=s.storage_base_url,
            )
        if backend == "s3":
            try:
                from dealroom.infrastructure.external.storage.s3_storage import (
                    S3StorageService,
                )
            except ImportError as e:
                raise ValueError(
                    "S3 backend requires boto3. Install with: pip install 'dealroom[s3]'"
                ) from e
            return S3StorageService(
                bucket=s.s3_bucket,
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=s.s3_secret_key.get_secret_value() if s.s3_secret_key else None,
            )
        raise ValueError(f"Unknown storage backend: {backend}. Supported: 'local', 's3'")
