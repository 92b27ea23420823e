"""Shared fixtures for the voice expense tests."""

from datetime import date

import pytest

from voice_expense.audit import AuditLogger
from voice_expense.config import ParserSettings
from voice_expense.models.currency import CurrencyDefinition
from voice_expense.parsing import CategoryClassifier, CurrencyDetector, NumberPhraseParser
from voice_expense.processor import VoiceCommandProcessor
from voice_expense.registry import CurrencyRegistry, load_currency_registry


@pytest.fixture(scope="session")
def registry() -> CurrencyRegistry:
    """The packaged 36-currency table."""
    return load_currency_registry()


@pytest.fixture
def detector(registry) -> CurrencyDetector:
    return CurrencyDetector(registry)


@pytest.fixture
def number_parser() -> NumberPhraseParser:
    return NumberPhraseParser()


@pytest.fixture
def classifier() -> CategoryClassifier:
    return CategoryClassifier()


@pytest.fixture
def parser_settings() -> ParserSettings:
    return ParserSettings(currencies_path=None)


@pytest.fixture
def processor(registry, parser_settings) -> VoiceCommandProcessor:
    return VoiceCommandProcessor(
        registry,
        settings=parser_settings,
        audit_logger=AuditLogger(),
    )


@pytest.fixture
def today() -> date:
    return date(2025, 3, 14)


@pytest.fixture
def make_currency():
    """Factory for small hand-built currency records."""
    def _make(code: str, symbol: str, keywords=(), locale: str = "en_US", **extra):
        return CurrencyDefinition(
            code=code,
            symbol=symbol,
            display_name=extra.pop("display_name", code),
            locale=locale,
            keywords=tuple(keywords),
            **extra,
        )
    return _make
