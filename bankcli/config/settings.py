"""
Configuration Management for BankCLI

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, account id format and logging behaviour are
validated once at startup instead of being scattered as constants.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Ledger document storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BANKCLI_STORAGE_",
        extra="ignore"
    )

    data_path: Path = Field(
        default=Path("bank-data.json"),
        description="Path to the JSON ledger document (relative to the working directory)"
    )
    indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation used when writing the ledger document"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is attempted"
    )
    audit_path: Optional[Path] = Field(
        default=None,
        description="JSON Lines file for the audit trail; unset keeps the trail in the log only"
    )

    @property
    def resolved_data_path(self) -> Path:
        """Data path resolved against the current working directory."""
        return self.data_path.expanduser().resolve()


class LedgerSettings(BaseSettings):
    """Account ledger rules."""

    model_config = SettingsConfigDict(
        env_prefix="BANKCLI_LEDGER_",
        extra="ignore"
    )

    account_id_prefix: str = Field(
        default="ACC-",
        min_length=1,
        description="Fixed prefix of every account id"
    )
    account_id_min: int = Field(
        default=1000,
        ge=0,
        description="Smallest numeric part of an account id"
    )
    account_id_max: int = Field(
        default=9999,
        ge=0,
        description="Largest numeric part of an account id"
    )
    currency_symbol: str = Field(
        default="$",
        description="Symbol used in user-facing balance messages"
    )

    @model_validator(mode='after')
    def validate_id_range(self) -> 'LedgerSettings':
        """The id range must not be empty."""
        if self.account_id_max < self.account_id_min:
            raise ValueError("account_id_max cannot be smaller than account_id_min")
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="Structured log renderer"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any casing, store upper case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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
    "<name>_error" entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
