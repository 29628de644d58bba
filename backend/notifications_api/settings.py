"""Application settings and configuration."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    DATABASE_URL, HOST and PORT have no defaults: loading settings without them
    raises, so the process fails fast at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Notifications API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)

    # Database
    database_url: str = Field(min_length=1)
    database_echo: bool = False
    database_pool_size: int = Field(default=5, gt=0)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_timeout: float = Field(default=30.0, gt=0)  # seconds to wait for a pooled connection
    database_ssl_verify: bool = False  # only used when the URL has sslmode=require
    create_schema_on_startup: bool = True

    # HTTP
    # Collapse every failure status to 400 (404/500 otherwise)
    legacy_status_codes: bool = False
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""
    get_settings.cache_clear()
