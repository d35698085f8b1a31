"""Configuration package."""

from budget_integrity.config.settings import (
    LoggingSettings,
    Settings,
    ValidationSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LoggingSettings",
    "Settings",
    "ValidationSettings",
    "get_settings",
    "validate_all_settings",
]
