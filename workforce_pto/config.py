from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Workforce PTO"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://workforce_pto:workforce_pto@db:5432/workforce_pto"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    create_tables_on_startup: bool = True
    # Upper bound for each employee/timesheet directory call made while computing a balance.
    collaborator_timeout_seconds: float = 5.0


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
