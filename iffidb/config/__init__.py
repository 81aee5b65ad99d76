"""Configuration package."""

from iffidb.config.settings import (
    AuthSettings,
    ConsoleSettings,
    LatencySettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AuthSettings",
    "ConsoleSettings",
    "LatencySettings",
    "Settings",
    "StoreSettings",
    "get_settings",
    "validate_all_settings",
]
