"""
End-to-end tests for the voice command processor

Each scenario runs a full transcript through extraction, currency
resolution, validation, classification and detail extraction.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from structlog.testing import capture_logs

from voice_expense.audit import AuditLogger
from voice_expense.config import get_settings
from voice_expense.models.expense import (
    CurrencyResolution,
    ExpenseCategory,
    ParseErrorKind,
)
from voice_expense.processor import (
    VoiceCommandProcessor,
    create_voice_pipeline,
    region_from_locale,
)


class TestScenarios:
    """Canonical transcripts."""

    def test_spoken_amount_and_keyword(self, processor):
        """Test 'two thousand dirhams on groceries'."""
        result = processor.process_voice_command(
            "I just spent two thousand dirhams on groceries"
        )
        assert result.is_success
        command = result.command
        assert command.amount == Decimal("2000.00")
        assert command.currency_code == "AED"
        assert command.category == ExpenseCategory.GROCERY
        assert command.currency_match == CurrencyResolution.KEYWORD
        assert command.raw_transcript == "I just spent two thousand dirhams on groceries"

    def test_symbol_beats_default(self, processor):
        """Test that a spoken symbol wins over the default currency."""
        result = processor.process_voice_command(
            "I spent ₹20 for tea", default_currency="AED"
        )
        command = result.command
        assert command.amount == Decimal("20.00")
        assert command.currency_code == "INR"
        assert command.currency_match == CurrencyResolution.SYMBOL
        assert command.notes == "tea"
        assert command.category == ExpenseCategory.FOOD_AND_DINING
        assert command.confidence == 0.9

    def test_default_currency(self, processor):
        """Test the default when no currency is spoken."""
        result = processor.process_voice_command(
            "I spent 50 on groceries", default_currency="AED"
        )
        command = result.command
        assert command.amount == Decimal("50.00")
        assert command.currency_code == "AED"
        assert command.currency_match == CurrencyResolution.DEFAULT
        assert command.confidence == 0.8

    def test_merchant(self, processor):
        """Test 'paid 100 dollars at Amazon'."""
        command = processor.process_voice_command("paid 100 dollars at Amazon").command
        assert command.amount == Decimal("100.00")
        assert command.currency_code == "USD"
        assert command.merchant == "Amazon"
        assert command.category == ExpenseCategory.SHOPPING
        assert command.confidence == 1.0

    def test_empty_input(self, processor):
        result = processor.process_voice_command("")
        assert result.is_success is False
        assert result.error.kind == ParseErrorKind.EMPTY_INPUT
        assert result.error.suggested_fix

    def test_decimal_amount(self, processor):
        command = processor.process_voice_command("I spent 99.99 dollars").command
        assert command.amount == Decimal("99.99")
        assert command.currency_code == "USD"

    def test_count_before_amount(self, processor):
        """Test 'I bought one coffee for 5 dollars'."""
        command = processor.process_voice_command("I bought one coffee for 5 dollars").command
        assert command.amount == Decimal("5.00")
        assert command.currency_code == "USD"

    def test_code_word_in_sentence(self, processor):
        """Test that 'try' in a sentence does not turn into lira."""
        command = processor.process_voice_command(
            "I paid 20 dollars to try the new cafe"
        ).command
        assert command.amount == Decimal("20.00")
        assert command.currency_code == "USD"
        assert command.currency_match == CurrencyResolution.KEYWORD


class TestCurrencyResolution:
    """Tests for the detected -> default -> locale order."""

    def test_code(self, processor):
        command = processor.process_voice_command("Paid 75 AED for parking").command
        assert command.currency_code == "AED"
        assert command.currency_match == CurrencyResolution.CODE
        assert command.category == ExpenseCategory.TRANSPORTATION

    def test_default_is_normalized(self, processor):
        command = processor.process_voice_command(
            "I spent 50 on groceries", default_currency=" aed "
        ).command
        assert command.currency_code == "AED"

    @pytest.mark.parametrize("locale,expected", [
        ("en_IN", "INR"),
        ("ar_AE", "AED"),
        ("en-US", "USD"),
        ("ja_JP", "JPY"),
    ])
    def test_locale_fallback(self, processor, locale, expected):
        """Test the locale region when nothing else applies."""
        command = processor.process_voice_command(
            "I spent 50 on groceries", locale=locale
        ).command
        assert command.currency_code == expected
        assert command.currency_match == CurrencyResolution.LOCALE

    def test_default_beats_locale(self, processor):
        command = processor.process_voice_command(
            "I spent 50 on groceries", locale="en_IN", default_currency="USD"
        ).command
        assert command.currency_code == "USD"
        assert command.currency_match == CurrencyResolution.DEFAULT

    def test_unknown_locale_region(self, processor):
        """Test that a region without a currency is unresolved."""
        result = processor.process_voice_command("I spent 50 on groceries", locale="fr_FR")
        assert result.error.kind == ParseErrorKind.UNRESOLVED_CURRENCY

    def test_no_currency_at_all(self, processor):
        result = processor.process_voice_command("I spent 50 on groceries")
        assert result.error.kind == ParseErrorKind.UNRESOLVED_CURRENCY

    def test_unknown_default(self, processor):
        """Test that an unsupported default is not used."""
        result = processor.process_voice_command(
            "I spent 50 on groceries", default_currency="XYZ"
        )
        assert result.error.kind == ParseErrorKind.UNRESOLVED_CURRENCY
        assert "XYZ" in result.error.message


class TestAmountErrors:
    """Tests for amount failures."""

    def test_missing_amount(self, processor):
        result = processor.process_voice_command("I bought coffee at Starbucks")
        assert result.error.kind == ParseErrorKind.MISSING_AMOUNT
        assert result.error.transcript == "I bought coffee at Starbucks"

    def test_ambiguous_phrase(self, processor):
        result = processor.process_voice_command("I spent five five dollars")
        assert result.error.kind == ParseErrorKind.AMBIGUOUS_NUMBER_PHRASE

    def test_zero_amount(self, processor):
        result = processor.process_voice_command("I spent 0 dollars")
        assert result.error.kind == ParseErrorKind.AMOUNT_OUT_OF_RANGE

    def test_amount_over_maximum(self, processor):
        result = processor.process_voice_command("I spent 99999999999999 dollars")
        assert result.error.kind == ParseErrorKind.AMOUNT_OUT_OF_RANGE

    def test_amount_too_large_to_round(self, processor):
        """Test amounts beyond decimal precision."""
        result = processor.process_voice_command("I spent 1" + "0" * 30 + " dollars")
        assert result.error.kind == ParseErrorKind.AMOUNT_OUT_OF_RANGE

    def test_rounding_half_up(self, processor):
        command = processor.process_voice_command("I spent 10.125 dollars").command
        assert command.amount == Decimal("10.13")

    def test_small_amount_is_accepted(self, processor):
        """Test that small amounts only warn."""
        command = processor.process_voice_command("I spent 0.50 dollars on coffee").command
        assert command.amount == Decimal("0.50")

    def test_indian_scale(self, processor):
        command = processor.process_voice_command(
            "I paid five lakh rupees for the car"
        ).command
        assert command.amount == Decimal("500000.00")
        assert command.currency_code == "INR"
        assert command.category == ExpenseCategory.TRANSPORTATION


class TestDetails:
    """Tests for category and detail fields."""

    def test_relative_date(self, processor, today):
        command = processor.process_voice_command(
            "I spent 30 dollars on a taxi yesterday", today=today
        ).command
        assert command.transaction_date == date(2025, 3, 13)

    def test_merchant_and_notes(self, processor):
        command = processor.process_voice_command(
            "spent 50 dirhams at Carrefour for groceries"
        ).command
        assert command.merchant == "Carrefour"
        assert command.notes == "groceries"
        assert command.category == ExpenseCategory.GROCERY

    def test_other_category(self, processor):
        command = processor.process_voice_command("I spent 50 dirhams").command
        assert command.category == ExpenseCategory.OTHER

    def test_source(self, processor):
        command = processor.process_voice_command("I spent 50 dirhams").command
        assert command.source == "voice_assistant"


class TestConfidence:
    """Tests for get_confidence_score()."""

    def test_empty(self, processor):
        assert processor.get_confidence_score("") == 0.0
        assert processor.get_confidence_score(None) == 0.0

    def test_no_signals(self, processor):
        assert processor.get_confidence_score("hello there") == 0.0

    def test_amount_only(self, processor):
        assert processor.get_confidence_score("50") == 0.3

    def test_spoken_amount_counts(self, processor):
        assert processor.get_confidence_score("twenty") == 0.3

    def test_capped_at_one(self, processor):
        assert processor.get_confidence_score(
            "I paid 20 dollars for lunch at the cafe"
        ) == 1.0


class TestSuggestedPhrases:
    """Tests for get_suggested_phrases()."""

    def test_phrases_in_currency(self, processor):
        phrases = processor.get_suggested_phrases("AED")
        assert len(phrases) == 7
        assert phrases[0] == "I just spent 25 dirhams on food"

    def test_default_currency(self, processor):
        """Test that the top-ranked currency is used by default."""
        assert "dirhams" in processor.get_suggested_phrases()[0]

    def test_invariant_plural(self, processor):
        assert processor.get_suggested_phrases("JPY")[0] == "I just spent 25 yen on food"

    def test_lowercase_code(self, processor):
        assert "dollars" in processor.get_suggested_phrases("usd")[1]

    def test_unknown_currency(self, processor):
        with pytest.raises(KeyError):
            processor.get_suggested_phrases("XYZ")

    def test_suggestions_parse(self, processor):
        """Test that every suggestion parses in its own currency."""
        for phrase in processor.get_suggested_phrases("GBP"):
            result = processor.process_voice_command(phrase)
            assert result.is_success, phrase
            assert result.command.currency_code == "GBP"


class TestAuditTrail:
    """Tests for audit events emitted during a parse."""

    def test_success_events(self, registry, parser_settings):
        """Test the events of a successful parse."""
        correlation_id = uuid4()
        with capture_logs() as logs:
            processor = VoiceCommandProcessor(
                registry, settings=parser_settings, audit_logger=AuditLogger(),
            )
            processor.process_voice_command(
                "I just spent two thousand dirhams on groceries",
                correlation_id=correlation_id,
            )
        event_types = [log["event_type"] for log in logs]
        assert event_types == [
            "transcript_received",
            "amount_extracted",
            "currency_resolved",
            "category_classified",
            "command_parsed",
        ]
        assert all(log["correlation_id"] == str(correlation_id) for log in logs)

    def test_failure_events(self, registry, parser_settings):
        with capture_logs() as logs:
            processor = VoiceCommandProcessor(
                registry, settings=parser_settings, audit_logger=AuditLogger(),
            )
            processor.process_voice_command("I spent 0 dollars")
        event_types = [log["event_type"] for log in logs]
        assert "validation_failed" in event_types
        assert event_types[-1] == "parse_failed"
        assert logs[-1]["log_level"] == "warning"

    def test_without_audit_logger(self, registry, parser_settings):
        """Test that the processor works with no audit logger."""
        processor = VoiceCommandProcessor(registry, settings=parser_settings)
        assert processor.process_voice_command("I spent 5 dollars").is_success


class TestLocaleRegion:
    """Tests for region_from_locale()."""

    @pytest.mark.parametrize("locale,expected", [
        ("en_AE", "AE"),
        ("ar-SA", "SA"),
        ("zh_Hant_HK", "HK"),
        ("es_419", "419"),
        ("en_us", "US"),
        ("en", None),
        ("", None),
        (None, None),
    ])
    def test_region(self, locale, expected):
        assert region_from_locale(locale) == expected


class TestPipelineFactory:
    """Tests for create_voice_pipeline()."""

    @pytest.fixture(autouse=True)
    def fresh_settings(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_default_pipeline(self):
        processor = create_voice_pipeline()
        assert len(processor.registry) == 36
        result = processor.process_voice_command("paid 100 dollars at Amazon")
        assert result.command.currency_code == "USD"

    def test_common_currencies_from_environment(self, monkeypatch):
        """Test that common currencies change the default suggestions."""
        monkeypatch.setenv("VOICE_EXPENSE_COMMON_CURRENCIES", "INR,USD")
        processor = create_voice_pipeline()
        assert processor.registry.codes[:2] == ("INR", "USD")
        assert "rupees" in processor.get_suggested_phrases()[0]

    def test_currency_table_from_environment(self, monkeypatch, tmp_path):
        path = tmp_path / "currencies.json"
        path.write_text(
            '{"currencies": [{"code": "EUR", "symbol": "€", "displayName": "Euro",'
            ' "voiceKeywords": ["euro"]}]}',
            encoding="utf-8",
        )
        monkeypatch.setenv("VOICE_EXPENSE_CURRENCIES_PATH", str(path))
        processor = create_voice_pipeline()
        assert processor.registry.codes == ("EUR",)

    def test_audit_disabled(self, monkeypatch):
        monkeypatch.setenv("AUDIT_ENABLED", "false")
        with capture_logs() as logs:
            processor = create_voice_pipeline()
            processor.process_voice_command("I spent 5 dollars")
        assert logs == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
