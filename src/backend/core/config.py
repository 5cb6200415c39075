"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "MeetPoll"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # JSON output for log aggregation (production)

    # Database - full URL override (e.g. sqlite+aiosqlite:// for local runs)
    DATABASE_URL: str | None = None

    # Database - PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "meetpoll"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "meetpoll"
    DB_POOL_SIZE: int = 5

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str, info: Any) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"{info.field_name} must be a standard logging level, got {v!r}")
        return level

    @property
    def POSTGRES_URL(self) -> str:
        """Construct PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def database_url(self) -> str:
        """URL the engine connects to: DATABASE_URL if set, else PostgreSQL."""
        return self.DATABASE_URL or self.POSTGRES_URL

    @property
    def is_development(self) -> bool:
        return self.APP_ENV in ("development", "test") or self.DEBUG

    # Results
    RESULTS_TOP_RANGES: int = 5  # Number of contiguous time ranges shown in the Top-N list

    # Completion re-evaluation after a vote is acknowledged
    COMPLETION_CHECK_TIMEOUT_SECONDS: float = 5.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
