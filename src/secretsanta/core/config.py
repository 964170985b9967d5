"""SecretSanta settings.

Every value can be set through a ``SECRETSANTA_<FIELD>`` environment variable
or a ``.env`` file in the working directory. Settings are validated once and
shared through ``get_settings()``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "testing"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Validated configuration for the server, the CLI and the HTTP client."""

    model_config = SettingsConfigDict(
        env_prefix="SECRETSANTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "SecretSanta"
    app_version: str = "0.1.0"
    environment: Environment = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # uvicorn
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1)

    database_url: str = "sqlite+aiosqlite:///./santa_data/secretsanta.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Applied on every new SQLite connection
    db_sqlite_journal_mode: str = "WAL"
    db_sqlite_busy_timeout: int = 5000  # ms
    db_sqlite_foreign_keys: bool = True

    actor_header: str = Field(
        default="X-Santa-User",
        description="Request header naming the acting user",
    )

    log_level: LogLevel = "INFO"
    log_format: Literal["json", "console"] = "json"

    api_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Server the `secretsanta client` commands talk to",
    )
    client_timeout: float = Field(default=10.0, gt=0)

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, value: str) -> str:
        """Force a leading slash and drop any trailing one."""
        value = "/" + value.strip().strip("/")
        return value

    @field_validator("api_url")
    @classmethod
    def strip_api_url(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def check_sqlite_workers(self) -> "Settings":
        """SQLite files cannot be shared safely between worker processes."""
        if self.is_sqlite and self.workers > 1:
            raise ValueError(
                f"SQLite does not support multiple worker processes (got {self.workers}). "
                "Run a single worker or point SECRETSANTA_DATABASE_URL at PostgreSQL."
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def database_url_sync(self) -> str:
        """The database URL with its async driver swapped for the sync one."""
        for async_driver, sync_driver in (
            ("sqlite+aiosqlite", "sqlite"),
            ("postgresql+asyncpg", "postgresql"),
        ):
            if self.database_url.startswith(async_driver):
                return sync_driver + self.database_url[len(async_driver):]
        return self.database_url


@lru_cache
def get_settings() -> Settings:
    """Load the settings once and reuse them."""
    return Settings()
