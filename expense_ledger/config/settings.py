"""
Configuration Management for the Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Nothing in the ledger core reads the environment directly; the only
environment-derived fact it needs (where the ledger file lives) is
resolved by `LedgerSettings.ledger_path`.
"""

import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FILE_NAME = "expenses.json"


def executable_dir() -> Path:
    """
    Directory of the running executable.

    Frozen bundles report their own binary in sys.executable; a plain
    interpreter run is located by the launched script instead.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Persistence
    data_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding the ledger file (defaults to the executable's directory)"
    )
    data_file_name: str = Field(
        default=DEFAULT_FILE_NAME,
        min_length=1,
        description="Name of the ledger file"
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indent used when pretty-printing the ledger file"
    )
    backup_corrupt_file: bool = Field(
        default=True,
        description="Copy an unreadable ledger file aside before falling back to defaults"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for the final save performed at shutdown"
    )

    # Ledger behaviour
    auto_recompute_net_worth: bool = Field(
        default=True,
        description="Recompute net worth after income or cost changes"
    )
    gregorian_leap_years: bool = Field(
        default=False,
        description="Apply the full 100/400 leap-year rule instead of divisible-by-4"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    @field_validator('data_file_name')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """The ledger file name must not smuggle in a directory."""
        if Path(v).name != v:
            raise ValueError(f"data_file_name must be a bare file name, got: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise to an upper-case stdlib level name."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level

    @property
    def ledger_path(self) -> Path:
        """Full path of the ledger file."""
        directory = self.data_dir if self.data_dir is not None else executable_dir()
        return directory / self.data_file_name


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
