"""Configuration package."""

from library_ledger.config.settings import (
    AppSettings,
    BootstrapSettings,
    LendingSettings,
    Settings,
    StorageSettings,
    check_delimiter_compatible,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BootstrapSettings",
    "LendingSettings",
    "Settings",
    "StorageSettings",
    "check_delimiter_compatible",
    "get_settings",
    "validate_all_settings",
]
