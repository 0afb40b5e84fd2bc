
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Grifo API"
    app_env: str = "development"
    app_port: int = 8000
    app_version: str = "1.0.0"
    frontend_url: str = "http://localhost:3000"

    # Database (Postgres via asyncpg in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./grifo_dev.db",
        alias="DATABASE_URL",
    )

    # Signed tokens for portal / mobile users
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expire_minutes: int = Field(default=60 * 24, alias="JWT_EXPIRE_MINUTES")

    # Opaque session tokens for the client portal
    client_session_days: int = Field(default=7, alias="CLIENT_SESSION_DAYS")

    # Object storage
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")  # "local" | "s3"
    storage_local_path: str = Field(default="./uploads", alias="STORAGE_LOCAL_PATH")
    storage_public_base_url: str = Field(
        default="http://localhost:8000/files", alias="STORAGE_PUBLIC_BASE_URL",
    )
    s3_bucket: str | None = Field(default=None, alias="S3_BUCKET")
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")

    # Upload limits
    max_upload_size_mb: int = Field(default=10, alias="MAX_UPLOAD_SIZE_MB")
    max_upload_files: int = Field(default=10, alias="MAX_UPLOAD_FILES")

    # Sync operations
    sync_max_retries: int = Field(default=3, alias="SYNC_MAX_RETRIES")

    # Write-request audit trail
    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
