"""Application settings loaded from the environment.

Hey future me - precedence is pydantic-settings' own ordering: values passed to the
constructor win, then environment variables (and .env), then the defaults below.
The service layer gets a ProviderSettings handed in at construction and never
touches os.environ itself, so tests just build ProviderSettings(api_url=...).
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.jikan.moe/v4"
DEFAULT_BACKUP_API_URL = "https://kitsu.io/api/edge"
DEFAULT_ANILIST_GRAPHQL_URL = "https://graphql.anilist.co"
DEFAULT_REQUEST_TIMEOUT = 5.0


class ProviderSettings(BaseSettings):
    """Base URLs and timeout for the metadata providers."""

    # No env prefix: field names map case-insensitively onto API_URL, BACKUP_API_URL, ...
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_url: str = DEFAULT_API_URL
    backup_api_url: str = DEFAULT_BACKUP_API_URL
    anilist_graphql_url: str = DEFAULT_ANILIST_GRAPHQL_URL
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    @field_validator("api_url", "backup_api_url", "anilist_graphql_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class LoggingSettings(BaseSettings):
    """Logging output configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    json_format: bool = False


class Settings(BaseSettings):
    """Top-level settings container."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "shonenx"
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
