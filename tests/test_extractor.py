"""
Tests for amount + currency extraction
"""

import pytest
from decimal import Decimal

from voice_expense.parsing import AmountCurrencyExtractor, NumberPhraseParser


@pytest.fixture
def extractor(detector):
    return AmountCurrencyExtractor(detector)


class TestExtract:
    """Tests for extract()."""

    def test_symbol(self, extractor):
        """Test a symbol glued to digits."""
        extraction = extractor.extract("I spent ₹20 for tea")
        assert extraction.amount == Decimal("20")
        assert extraction.currency_code == "INR"
        assert extraction.currency_match == "symbol"
        assert extraction.matched_text == "₹"
        assert extraction.ambiguous is False

    def test_keyword(self, extractor):
        extraction = extractor.extract("I just spent two thousand dirhams on groceries")
        assert extraction.amount == Decimal("2000")
        assert extraction.currency_code == "AED"
        assert extraction.currency_match == "keyword"

    def test_code(self, extractor):
        extraction = extractor.extract("Paid 75 AED for parking")
        assert extraction.amount == Decimal("75")
        assert extraction.currency_code == "AED"
        assert extraction.currency_match == "code"

    def test_default_currency(self, extractor):
        """Test the caller's default when nothing is spoken."""
        extraction = extractor.extract("I spent 50 on groceries", default_currency="aed")
        assert extraction.currency_code == "AED"
        assert extraction.currency_match == "default"
        assert extraction.matched_text is None

    def test_no_currency(self, extractor):
        extraction = extractor.extract("I spent 50 on groceries")
        assert extraction.amount == Decimal("50")
        assert extraction.currency_code is None
        assert extraction.currency_match is None

    def test_ambiguous_amount(self, extractor):
        """Test that an ambiguous phrase is flagged, not guessed."""
        extraction = extractor.extract("I spent five five dollars")
        assert extraction.amount is None
        assert extraction.ambiguous is True
        assert extraction.currency_code == "USD"

    def test_missing_amount(self, extractor):
        extraction = extractor.extract("bought coffee")
        assert extraction.amount is None
        assert extraction.ambiguous is False

    def test_empty(self, extractor):
        extraction = extractor.extract("")
        assert extraction.amount is None
        assert extraction.currency_code is None

    def test_symbol_after_amount(self, extractor):
        extraction = extractor.extract("lunch was 50 € today")
        assert extraction.amount == Decimal("50")
        assert extraction.currency_code == "EUR"

    def test_amount_beside_currency_wins(self, extractor):
        """Test that a count earlier in the sentence is not the amount."""
        extraction = extractor.extract("I bought one coffee for 5 dollars")
        assert extraction.amount == Decimal("5")
        assert extraction.currency_code == "USD"

    @pytest.mark.parametrize("text,amount", [
        ("two coffees for 10 dollars", Decimal("10")),
        ("3 items, $45 total", Decimal("45")),
        ("for 2 people, 40 canadian dollars", Decimal("40")),
        ("2 tickets, AED 150", Decimal("150")),
    ])
    def test_amount_anchored_on_currency(self, extractor, text, amount):
        assert extractor.extract(text).amount == amount


class TestExtractAmountAndCurrency:
    """Tests for extract_amount_and_currency()."""

    @pytest.mark.parametrize("text,amount,code", [
        ("$50", Decimal("50"), "USD"),
        ("$5.99 for coffee", Decimal("5.99"), "USD"),
        ("I paid 1,250.75 dirhams", Decimal("1250.75"), "AED"),
        ("fifty dollars", Decimal("50"), "USD"),
        ("five lakh rupees", Decimal("500000"), "INR"),
        ("I spent 99.99 dollars", Decimal("99.99"), "USD"),
        ("five dollars and fifty cents", Decimal("5.50"), "USD"),
    ])
    def test_pairs(self, extractor, text, amount, code):
        """Test (amount, currency) pairs."""
        assert extractor.extract_amount_and_currency(text) == (amount, code)

    def test_currency_alone_is_not_a_result(self, extractor):
        """Test that a currency without an amount gives None."""
        assert extractor.extract_amount_and_currency("dollars") is None

    def test_amount_alone_is_not_a_result(self, extractor):
        assert extractor.extract_amount_and_currency("50 for lunch") is None

    def test_amount_with_default(self, extractor):
        assert extractor.extract_amount_and_currency(
            "50 for lunch", default_currency="GBP"
        ) == (Decimal("50"), "GBP")


class TestComponents:
    """Tests for wiring."""

    def test_custom_number_parser(self, detector):
        parser = NumberPhraseParser()
        extractor = AmountCurrencyExtractor(detector, parser)
        assert extractor.number_parser is parser
        assert extractor.detector is detector


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
