"""Application settings loaded from the environment."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """TaskFlow settings.

    Every field can be overridden with a ``TASKFLOW_`` prefixed environment
    variable or an entry in ``.env``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record service
    record_api_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the hosted record storage service",
    )
    project_id: str = Field(default="", description="Record service project identifier")
    public_key: str = Field(default="", description="Record service public key")
    request_timeout: float = Field(default=10.0, gt=0)

    # Paging ceilings per entity
    task_page_size: int = Field(default=100, ge=1)
    project_page_size: int = Field(default=50, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
