"""
Configuration Management for Library Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Store file locations, lending rules and the bootstrap account are all
visible in one place and validated at startup.
"""

import re
import string
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Characters that occur inside encoded values: digits and hex in hashes,
# dates and fines, the base64 alphabet in salts, letters in status and role labels
RESERVED_DELIMITER_CHARS = frozenset(string.ascii_letters + string.digits + "+/=")

_DATE_DIRECTIVE = re.compile(r"%(%|[-#]?[A-Za-z])")


def date_format_literals(date_format: str) -> str:
    """The characters a strftime pattern writes verbatim."""
    return _DATE_DIRECTIVE.sub(lambda m: "%" if m.group(1) == "%" else "", date_format)


def check_delimiter_compatible(storage: "StorageSettings", lending: "LendingSettings") -> None:
    """
    Ensure formatted dates never contain the store delimiter.

    Raises:
        ValueError: If the date format writes the delimiter literally
    """
    if storage.delimiter in date_format_literals(lending.date_format):
        raise ValueError(
            f"Delimiter '{storage.delimiter}' appears in date format '{lending.date_format}'"
        )


class StorageSettings(BaseSettings):
    """Flat-file store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the store files"
    )
    books_file: str = Field(
        default="books.csv",
        description="File name of the books store"
    )
    users_file: str = Field(
        default="users.csv",
        description="File name of the users store"
    )
    transactions_file: str = Field(
        default="transactions.csv",
        description="File name of the transactions store"
    )
    delimiter: str = Field(
        default=",",
        min_length=1,
        max_length=1,
        description="Single reserved field separator"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the store files"
    )

    # Write retry policy
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a full-file rewrite is attempted"
    )
    write_retry_wait_seconds: float = Field(
        default=0.2,
        ge=0.0,
        description="Pause between write attempts"
    )

    @field_validator('delimiter')
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """The delimiter cannot be whitespace or a character of any encoded value."""
        if v.isspace():
            raise ValueError("Delimiter must not be whitespace")
        if v in RESERVED_DELIMITER_CHARS:
            raise ValueError(f"Delimiter '{v}' can occur in encoded values")
        return v

    @property
    def books_path(self) -> Path:
        return self.data_dir / self.books_file

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_file

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file


class LendingSettings(BaseSettings):
    """Loan period and fine policy."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LENDING_",
        extra="ignore"
    )

    loan_period_days: int = Field(
        default=7,
        ge=1,
        description="Days between issue date and due date"
    )
    fine_per_day: int = Field(
        default=10,
        ge=0,
        description="Fine charged per day late (integer minor units)"
    )
    date_format: str = Field(
        default="%d-%m-%Y",
        description="strftime pattern for dates in the transactions store"
    )


class BootstrapSettings(BaseSettings):
    """
    Default admin account created on first run.

    WARNING: The defaults are well known. Change them in any real deployment.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_BOOTSTRAP_",
        extra="ignore"
    )

    admin_username: str = Field(
        default="admin",
        min_length=1,
        description="Username of the bootstrap admin"
    )
    admin_password: str = Field(
        default="admin123",
        min_length=1,
        description="Password of the bootstrap admin"
    )


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

    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
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
    def lending(self) -> LendingSettings:
        return LendingSettings()

    @property
    def bootstrap(self) -> BootstrapSettings:
        return BootstrapSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "lending", "bootstrap", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    if results["storage"] and results["lending"]:
        try:
            check_delimiter_compatible(settings.storage, settings.lending)
            results["store_format"] = True
        except ValueError as e:
            results["store_format"] = False
            results["store_format_error"] = str(e)

    return results
