from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """CLI configuration loaded from ROLLOUTSCOPE_* environment variables and .env files."""

    api_base_url: str = "https://api.omnistrate.cloud"
    api_token: Optional[str] = None
    request_timeout: float = 30.0
    max_attempts: int = Field(default=5, ge=1)
    log_level: LogLevel = "WARNING"
    default_max_events: int = 3

    model_config = SettingsConfigDict(
        env_prefix="ROLLOUTSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


@lru_cache
def get_settings() -> Settings:
    """Return cached CLI settings."""
    return Settings()
