"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Storage backend settings are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dealroom.shared.enums import UploadSurface

_MB = 1024 * 1024


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    Every field has a default; validate_storage checks that the selected
    storage backend is fully configured.
    """

    # App
    app_name: str = "dealroom"
    app_version: str = "0.1.0"
    debug: bool = False

    # Database (metadata store)
    database_url: str = "sqlite+aiosqlite:///./dealroom.db"
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Object storage
    storage_backend: str = "local"
    storage_root: str = "./storage"
    # Absolute base for local signed URLs (the API mount point).
    storage_base_url: str = "http://localhost:8000/api/v1"
    s3_bucket: str = "deal-documents"
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None

    # Document operations
    download_url_ttl_seconds: int = 300
    preview_url_ttl_seconds: int = 3600
    download_timeout_seconds: float = 30.0
    refetch_delay_ms: int = 400
    upload_concurrency: int = 3
    compensate_orphaned_objects: bool = True
    max_upload_size_documents_panel: int = 10 * _MB
    max_upload_size_document_center: int = 20 * _MB
    max_upload_size_category_section: int = 50 * _MB

    # Rate limiting (SlowAPI)
    rate_limit_enabled: bool = True

    # Access gate
    nda_required: bool = True

    # Redis change feed
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_storage(self) -> "Settings":
        """Validate the storage backend and operation limits."""
        if self.storage_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when storage_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.storage_backend != "local":
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        if self.upload_concurrency < 1:
            raise ValueError("upload_concurrency must be at least 1")
        return self

    @property
    def refetch_delay_seconds(self) -> float:
        return self.refetch_delay_ms / 1000

    def max_upload_size_for(self, surface: UploadSurface) -> int:
        """Return the per-file size ceiling of an upload surface."""
        return {
            UploadSurface.DOCUMENTS_PANEL: self.max_upload_size_documents_panel,
            UploadSurface.DOCUMENT_CENTER: self.max_upload_size_document_center,
            UploadSurface.CATEGORY_SECTION: self.max_upload_size_category_section,
        }[surface]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() after changing env vars.
    """
    return Settings()
