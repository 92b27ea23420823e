"""
Currency Detection

Resolves the currency a transcript talks about, in priority order:
1. A symbol next to digits      ("$50", "₹ 20", "50 €")
2. An ISO code next to digits   ("50 AED", "usd50")
3. A keyword on word boundaries ("fifty dirhams", "swiss francs")

Keywords include the lowercased ISO codes, so "paid in aed" still resolves
at step 3. Among keywords the longest wins; a length tie goes to the
better ranked currency (common ones first), then to the earlier mention.

DESIGN DECISION: No hardcoded fallback.
When nothing matches, the caller's default is returned, or None.
The detector never invents a currency.
"""

import re
from typing import Optional

from voice_expense.models.currency import DetectedCurrency, MatchKind
from voice_expense.registry.currency_registry import CurrencyRegistry


class CurrencyDetector:
    """
    Detects currencies in free text using a CurrencyRegistry.

    Stateless apart from the immutable registry.
    """

    def __init__(self, registry: CurrencyRegistry):
        self._registry = registry

    @property
    def registry(self) -> CurrencyRegistry:
        return self._registry

    def detect(self, text: Optional[str]) -> Optional[DetectedCurrency]:
        """
        Find the best currency mention in the text.

        Returns the code together with how and where it was found.
        """
        if not text or not text.strip():
            return None

        return (
            self._detect_symbol(text)
            or self._detect_code(text)
            or self._detect_keyword(text)
        )

    def detect_currency(
        self,
        text: Optional[str],
        default_currency: Optional[str] = None,
    ) -> Optional[str]:
        """
        Currency code for the text, else the default, else None.
        """
        detected = self.detect(text)
        if detected is not None:
            return detected.code
        return default_currency

    def contains_currency(self, text: Optional[str]) -> bool:
        """True when any symbol, code or keyword is present."""
        if not text or not text.strip():
            return False
        return self.detect(text) is not None

    def normalize_currency_symbols(self, text: str) -> str:
        """
        Rewrite currency symbols to ISO codes next to their digits.

        "$50" -> "USD50", "$ 50" -> "USD50", "50 €" -> "50EUR".
        Alphabetic symbols such as "kr" are only rewritten next to digits.
        """
        if not text:
            return text

        def replace(match: re.Match) -> str:
            raw = match.group(0)
            codes = self._registry.codes_for_symbol(raw)
            if not codes:
                return raw
            start, end = match.span()
            before = text[start - 1] if start > 0 else ""
            after = text[end] if end < len(text) else ""
            prefix = " " if before.isalpha() else ""
            suffix = " " if after.isalpha() else ""
            return f"{prefix}{codes[0]}{suffix}"

        return self._registry.symbol_pattern.sub(replace, text)

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def _detect_symbol(self, text: str) -> Optional[DetectedCurrency]:
        match = self._registry.adjacent_symbol_pattern.search(text)
        if match is None:
            return None
        symbol = match.group("before") or match.group("after")
        codes = self._registry.codes_for_symbol(symbol)
        if not codes:
            return None
        return DetectedCurrency(
            code=codes[0],
            match_kind=MatchKind.SYMBOL,
            matched_text=symbol,
        )

    def _detect_code(self, text: str) -> Optional[DetectedCurrency]:
        match = self._registry.code_pattern.search(text)
        if match is None:
            return None
        code = match.group("before") or match.group("after")
        return DetectedCurrency(
            code=code.upper(),
            match_kind=MatchKind.CODE,
            matched_text=code,
        )

    def _detect_keyword(self, text: str) -> Optional[DetectedCurrency]:
        """
        Longest keyword wins; ties go to the better ranked currency,
        then to the earliest mention.
        """
        best = None
        best_key = None
        for match in self._registry.keyword_pattern.finditer(text):
            spoken = match.group(1)
            codes = self._registry.codes_for_keyword(spoken)
            if not codes:
                continue
            key = (-len(spoken), self._registry.rank(codes[0]), match.start(1))
            if best_key is None or key < best_key:
                best_key = key
                best = (codes[0], spoken)

        if best is None:
            return None
        return DetectedCurrency(
            code=best[0],
            match_kind=MatchKind.KEYWORD,
            matched_text=best[1],
        )
