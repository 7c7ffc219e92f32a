"""Runtime configuration loaded from environment variables and `.env`."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 10.0
DEFAULT_GITHUB_MAX_EVENTS = 100
DEFAULT_PORT = 4000


class Settings(BaseSettings):
    """
    Identities may be absent; the affected source then reports a configuration
    failure while the other one keeps answering.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    github_username: Optional[str] = Field(default=None, description="GitHub login whose events are read")
    github_token: Optional[str] = Field(default=None, description="GitHub bearer token")
    github_max_events: int = Field(default=DEFAULT_GITHUB_MAX_EVENTS, gt=0)
    stackoverflow_user_id: Optional[str] = Field(default=None, description="Stack Exchange user id")
    stackoverflow_site: str = Field(default="stackoverflow", min_length=1)
    stackexchange_key: Optional[str] = Field(default=None, description="Optional app key, raises the quota")
    stackoverflow_split_endpoints: bool = False
    cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0)
    upstream_timeout_seconds: float = Field(default=DEFAULT_UPSTREAM_TIMEOUT_SECONDS, gt=0)
    cors_origins: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["http://localhost:3000"])
    port: int = Field(default=DEFAULT_PORT, gt=0)

    @field_validator("github_username", "github_token", "stackoverflow_user_id", "stackexchange_key", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()
