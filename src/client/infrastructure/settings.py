"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared_kernel.sync.value_objects import DEFAULT_SYNCED_RECORD_TYPES


class DatabaseSettings(BaseSettings):
    """Local datastore settings.

    Environment variables:
        OUTBOX_SYNC_DB_PATH: SQLite file path, or ":memory:" (default: outbox_sync.db)
        OUTBOX_SYNC_DB_ECHO: Log emitted SQL (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_SYNC_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    path: str = Field(default="outbox_sync.db", description="SQLite database path")
    echo: bool = Field(default=False, description="Log emitted SQL statements")

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        """Reject an empty path."""
        if not value.strip():
            raise ValueError("path must not be empty")
        return value

    @property
    def url(self) -> str:
        """SQLAlchemy URL of the database."""
        if self.path == ":memory:":
            return "sqlite://"
        return f"sqlite:///{self.path}"


class SyncSettings(BaseSettings):
    """Sync queue settings.

    Environment variables:
        OUTBOX_SYNC_QUEUE_SYNCED_RECORD_TYPES: JSON list of record kinds to capture
        OUTBOX_SYNC_QUEUE_ENABLE_ON_STARTUP: Start capturing on creation (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_SYNC_QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    synced_record_types: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_SYNCED_RECORD_TYPES),
        description="Record kinds whose changes are queued for sync",
    )
    enable_on_startup: bool = Field(
        default=True,
        description="Enable change capture when the queue is created",
    )

    @field_validator("synced_record_types")
    @classmethod
    def validate_synced_record_types(cls, value: list[str]) -> list[str]:
        """Require at least one non-blank record kind."""
        record_types = [record_type.strip() for record_type in value]
        if not record_types or not all(record_types):
            raise ValueError("synced_record_types must list non-empty record kinds")
        return record_types


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Outbox Sync Client", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def sync(self) -> SyncSettings:
        """Get sync queue settings."""
        return get_sync_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache
def get_sync_settings() -> SyncSettings:
    """Get cached sync queue settings."""
    return SyncSettings()
