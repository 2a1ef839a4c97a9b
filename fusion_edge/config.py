"""Application configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    postgres_host: str = "postgres"
    postgres_port: int = 5432
    postgres_user: str = "fusion"
    postgres_password: str = "changeme"
    postgres_db: str = "fusion_db"
    # Full SQLAlchemy URL; takes precedence over the postgres_* parts
    sqlalchemy_database_uri: Optional[str] = None

    # Redis
    redis_url: str = "redis://redis:6379/0"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    functions_prefix: str = "/functions/v1"

    # Celery
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/0"
    celery_task_always_eager: bool = False

    # Managed auth provider (GoTrue-compatible admin API)
    auth_url: str = "http://auth:9999"
    service_role_key: str = "changeme-service-role-key"

    # Transactional email
    resend_api_url: str = "https://api.resend.com"
    resend_api_key: str = ""
    email_from: str = "Project Fusion <notifications@resend.dev>"
    email_timeout_seconds: float = 15.0

    # Devices
    require_device_signature: bool = False

    # Referral commissions
    commission_rate: float = 0.02
    currency: str = "TZS"

    # Maintenance jobs
    machine_offline_after_minutes: int = 5
    auto_confirm_after_hours: int = 24
    audit_retention_days: int = 90
    notification_summary_limit: int = 100

    # Logging
    log_level: str = "INFO"

    # Environment
    environment: str = "development"

    @property
    def database_url(self) -> str:
        """Build database URL."""
        if self.sqlalchemy_database_uri:
            return self.sqlalchemy_database_uri
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once."""
    return Settings()
