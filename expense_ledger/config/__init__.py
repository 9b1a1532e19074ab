"""Configuration package."""

from expense_ledger.config.settings import (
    DEFAULT_FILE_NAME,
    LedgerSettings,
    executable_dir,
    get_settings,
)

__all__ = [
    "DEFAULT_FILE_NAME",
    "LedgerSettings",
    "executable_dir",
    "get_settings",
]
