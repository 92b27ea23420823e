"""Configuration package."""

from voice_expense.config.settings import (
    DEFAULT_COMMON_CURRENCIES,
    AppSettings,
    ParserSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_COMMON_CURRENCIES",
    "AppSettings",
    "ParserSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
