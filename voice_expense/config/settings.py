"""
Configuration Management for Voice Expense

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The parsing engine itself never reads the environment; the host
builds settings once and hands them to the components that need them.
"""

import warnings
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_COMMON_CURRENCIES = "AED,USD,EUR,GBP,INR,SAR"


class ParserSettings(BaseSettings):
    """Voice parsing limits and currency table location."""

    model_config = SettingsConfigDict(
        env_prefix="VOICE_EXPENSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    max_amount: Decimal = Field(
        default=Decimal("999999999999.99"),
        gt=0,
        description="Largest amount accepted in a parsed command"
    )
    small_amount_warning: Decimal = Field(
        default=Decimal("1.00"),
        ge=0,
        description="Amounts below this are accepted but flagged as suspicious"
    )
    currencies_path: Optional[str] = Field(
        default=None,
        description="Path to a currencies JSON table (packaged table if unset)"
    )
    common_currencies: str = Field(
        default=DEFAULT_COMMON_CURRENCIES,
        description="Comma-separated currency codes that win keyword ties"
    )
    merchant_max_length: int = Field(
        default=100,
        ge=2,
        le=500,
        description="Longest merchant phrase kept"
    )
    notes_max_length: int = Field(
        default=500,
        ge=1,
        le=5000,
        description="Longest notes phrase kept"
    )

    @field_validator('currencies_path')
    @classmethod
    def validate_currencies_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if the table doesn't exist yet (it might be mounted later)."""
        if v and not Path(v).exists():
            warnings.warn(
                f"Currency table not found at {v}. "
                "Make sure it exists before building the registry."
            )
        return v

    @property
    def common_currencies_list(self) -> list[str]:
        """Get common currency codes as an ordered list."""
        return [
            code.strip().upper()
            for code in self.common_currencies.split(",")
            if code.strip()
        ]


class AppSettings(BaseSettings):
    """
    Host application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    audit_enabled: bool = Field(
        default=True,
        description="Record audit events for every parse"
    )


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
    def parser(self) -> ParserSettings:
        return ParserSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.parser
        results["parser"] = True
    except Exception as e:
        results["parser"] = False
        results["parser_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
