"""
Amount + Currency Extraction

Pairs the amount found by the number parser with the currency found by
the detector.

Flow:
1. Normalize symbols to ISO codes ("$50" -> "USD50")
2. Scan the normalized text for the amount, preferring the number
   next to a currency word ("two coffees for 10 dollars" -> 10)
3. Detect the currency on the ORIGINAL text
4. Fall back to the caller's default currency
"""

from decimal import Decimal
from typing import NamedTuple, Optional

from voice_expense.parsing.currency import CurrencyDetector
from voice_expense.parsing.numbers import NumberPhraseParser


class Extraction(NamedTuple):
    """What the extractor found in one transcript."""
    amount: Optional[Decimal]
    currency_code: Optional[str]
    currency_match: Optional[str]  # MatchKind value or "default"
    matched_text: Optional[str]
    ambiguous: bool  # number words present but no run resolved


class AmountCurrencyExtractor:
    """Finds the (amount, currency) pair of a transcript."""

    def __init__(
        self,
        detector: CurrencyDetector,
        number_parser: Optional[NumberPhraseParser] = None,
    ):
        self._detector = detector
        self._numbers = number_parser or NumberPhraseParser()

    @property
    def detector(self) -> CurrencyDetector:
        return self._detector

    @property
    def number_parser(self) -> NumberPhraseParser:
        return self._numbers

    def extract(
        self,
        text: Optional[str],
        default_currency: Optional[str] = None,
    ) -> Extraction:
        """
        Extract everything we can, including partial results.

        The processor uses the partial results to pick the right error.
        """
        if not text or not text.strip():
            return Extraction(None, None, None, None, False)

        normalized = self._detector.normalize_currency_symbols(text)
        scan = self._numbers.scan(
            normalized,
            names_currency_at=self._detector.registry.names_currency_at,
        )

        detected = self._detector.detect(text)
        if detected is not None:
            code = detected.code
            source: Optional[str] = detected.match_kind.value
            matched_text: Optional[str] = detected.matched_text
        elif default_currency:
            code = default_currency.strip().upper()
            source = "default"
            matched_text = None
        else:
            code = source = matched_text = None

        return Extraction(
            amount=scan.amount,
            currency_code=code,
            currency_match=source,
            matched_text=matched_text,
            ambiguous=scan.amount is None and scan.has_number_words,
        )

    def extract_amount_and_currency(
        self,
        text: Optional[str],
        default_currency: Optional[str] = None,
    ) -> Optional[tuple[Decimal, str]]:
        """
        (amount, currency_code), or None.

        A currency alone is never a result: no amount means None.
        """
        extraction = self.extract(text, default_currency)
        if extraction.amount is None or extraction.currency_code is None:
            return None
        return extraction.amount, extraction.currency_code

