from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "scopegate"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_identity_emails: bool = False  # Keep False in production (GDPR)

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Identity tokens (issued by the external identity provider)
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    # Access tokens (external-party portal access)
    access_token_expire_days: int = 30
    access_token_default_permissions: dict[str, bool] = {
        "view_requirements": True,
        "approve_requirements": True,
        "add_comments": True,
        "view_vendors": False,
        "view_scores": False,
    }
    access_token_cleanup_retention_days: int = 90

    # Owner bypass: statuses in which a creator may still edit their own record
    draft_statuses: list[str] = ["draft"]

    @field_validator("draft_statuses")
    @classmethod
    def validate_draft_statuses(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("DRAFT_STATUSES must name at least one status")
        return v

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Temporal
    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_task_queue: str = "scopegate-jobs"
    token_maintenance_schedule: str | None = None  # Cron syntax, e.g. "0 3 * * *"


@lru_cache
def get_settings() -> Settings:
    return Settings()
