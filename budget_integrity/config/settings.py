"""
Configuration Management for Budget Integrity

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The two numeric tolerances are the engine's only policy
knobs. They live here as frozen settings injected into each validator at
construction, never as module-level globals, so a policy change is a single
point and concurrent validators cannot disturb each other.
"""

from functools import cached_property, lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidationSettings(BaseSettings):
    """Numeric tolerances and reporting policy for the validators."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_VALIDATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    allocation_tolerance: float = Field(
        default=0.01,
        gt=0,
        description="Absolute tolerance for dollar amounts (one cent)"
    )
    proportion_tolerance: float = Field(
        default=0.0001,
        gt=0,
        description="Tolerance for strategy proportions summing to 1.0 (0.01%)"
    )
    negative_credit_balance_as_warning: bool = Field(
        default=False,
        description=(
            "Report negative balances held in credit channels as warnings "
            "instead of errors (only when channels are supplied)"
        )
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(
        default="INFO",
        description="Log level for the budget_integrity loggers"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False renders for the console)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Each sub-settings object is
    read from the environment once, on first access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @cached_property
    def validation(self) -> ValidationSettings:
        return ValidationSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool | str]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus {setting_name_error: message}
    for each failure. Useful for startup checks.
    """
    results: dict[str, bool | str] = {}

    settings = get_settings()

    for name in ("validation", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
