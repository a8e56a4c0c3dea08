"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    dsn: str = Field(
        default="sqlite+aiosqlite:///./tagsearch.db",
        description="SQLAlchemy async DSN for the search history store.",
    )
    echo: bool = False
    pool_recycle: int = Field(default=3600, ge=30)
    pool_pre_ping: bool = Field(default=True)


class BackendSettings(BaseModel):
    base_url: AnyHttpUrl | None = None
    api_token: SecretStr | None = None
    request_timeout_seconds: int = Field(default=10, ge=1, le=60)
    retry_attempts: int = Field(default=3, ge=1, le=10)
    retry_base_delay_seconds: float = Field(default=0.5, ge=0)


class SuggestionSettings(BaseModel):
    limit: int = Field(default=10, ge=1, le=100)
    debounce_seconds: float = Field(default=0.1, ge=0)


class SearchSettings(BaseModel):
    page_size: int = Field(default=20, ge=1, le=200)
    debounce_seconds: float = Field(default=0.5, ge=0)
    default_mode: Literal["all", "any"] = "all"
    tag_universe_limit: int = Field(default=1000, ge=1)
    error_title: str = "Search failed"
    error_message: str = "Could not search creators. Please try again later."


class HistorySettings(BaseModel):
    delimiter: str = Field(default=",", min_length=1)
    max_entries: int = Field(default=20, ge=1, le=500)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TAGSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    suggestions: SuggestionSettings = Field(default_factory=SuggestionSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)


@lru_cache
def get_settings() -> AppSettings:
    """Return cached settings instance."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "BackendSettings",
    "DatabaseSettings",
    "HistorySettings",
    "SearchSettings",
    "SuggestionSettings",
    "get_settings",
]
