"""Currency registry package."""

from voice_expense.registry.currency_registry import (
    DEFAULT_COMMON_CODES,
    CurrencyRegistry,
    RegistryError,
    load_currency_registry,
)

__all__ = [
    "DEFAULT_COMMON_CODES",
    "CurrencyRegistry",
    "RegistryError",
    "load_currency_registry",
]
