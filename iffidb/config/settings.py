"""
Configuration Management for IffiDB

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Latencies, credentials, storage location and console defaults are all
settings, so tests can build components with zero latency and an in-memory
medium without touching the environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Persistent store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="IFFIDB_STORE_",
        extra="ignore"
    )

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Key-value medium backing the store"
    )
    path: Path = Field(
        default=Path("iffidb_data.json"),
        description="JSON document used by the file medium"
    )
    key_prefix: str = Field(
        default="iffidb",
        description="Prefix for the persisted keys"
    )
    log_capacity: int = Field(
        default=100,
        ge=1,
        description="Maximum number of audit entries kept"
    )
    default_operator: str = Field(
        default="Admin",
        description="Attribution used for audit entries without a user"
    )


class LatencySettings(BaseSettings):
    """
    Simulated latency for service calls, in seconds.

    Mirrors a remote backend. Set all three to 0 in tests.
    """

    model_config = SettingsConfigDict(
        env_prefix="IFFIDB_LATENCY_",
        extra="ignore"
    )

    login: float = Field(default=0.8, ge=0.0)
    mutation: float = Field(default=0.3, ge=0.0)
    read: float = Field(default=0.1, ge=0.0)


class AuthSettings(BaseSettings):
    """Single-profile admin credentials."""

    model_config = SettingsConfigDict(
        env_prefix="IFFIDB_AUTH_",
        extra="ignore"
    )

    admin_email: str = Field(default="iffibaloch334@gmail.com")
    admin_password: str = Field(default="admin")
    admin_name: str = Field(default="Iftikhar Ali")
    admin_id: str = Field(default="admin-1")


class ConsoleSettings(BaseSettings):
    """Command console and export defaults."""

    model_config = SettingsConfigDict(
        env_prefix="IFFIDB_CONSOLE_",
        extra="ignore"
    )

    export_prefix: str = Field(
        default="iffidb_export",
        description="File name prefix for console exports"
    )
    records_export_prefix: str = Field(
        default="iffidb_records",
        description="File name prefix for filtered exports from the records page"
    )
    sample_size: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Records created by one sample-data run"
    )
    list_preview: int = Field(
        default=5,
        ge=1,
        description="Records shown by the list command"
    )
    export_dir: Optional[Path] = Field(
        default=None,
        description="Directory that receives CSV downloads in the terminal console"
    )

    @field_validator("export_dir")
    @classmethod
    def validate_export_dir(cls, v: Optional[Path]) -> Optional[Path]:
        """Warn if the export directory doesn't exist yet (it is created on first export)."""
        if v is not None and not v.exists():
            import warnings
            warnings.warn(
                f"Export directory {v} does not exist yet. "
                "It will be created on the first export."
            )
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def latency(self) -> LatencySettings:
        return LatencySettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def console(self) -> ConsoleSettings:
        return ConsoleSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    """
    results = {}
    settings = get_settings()

    for name in ("store", "latency", "auth", "console"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
