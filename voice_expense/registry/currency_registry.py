"""
Currency Registry

Immutable table of currencies plus the lookups the detector needs,
all precomputed once at construction:
- a rank (common currencies first, then alphabetical)
- symbol -> codes and keyword -> codes, rank ordered
- compiled patterns for symbols, ISO codes and keywords

DESIGN DECISION: The registry is built once and passed explicitly to the
components that need it. Nothing in the engine reaches for a global table,
so tests can build a registry from three currencies as easily as from 36.
"""

import json
import re
from importlib import resources
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

from voice_expense.audit.logger import AuditLogger
from voice_expense.config.settings import DEFAULT_COMMON_CURRENCIES
from voice_expense.models.currency import CurrencyDefinition, CurrencyTable


DEFAULT_COMMON_CODES = tuple(DEFAULT_COMMON_CURRENCIES.split(","))

# Letter edges: a match must not continue a word
_NO_LETTER_BEFORE = r"(?<![^\W\d_])"
_NO_LETTER_AFTER = r"(?![^\W\d_])"


class RegistryError(ValueError):
    """The currency table is empty, duplicated or otherwise unusable."""


def _guarded(fragment: str, text: str) -> str:
    """Add letter-edge guards where the text starts or ends with a letter."""
    prefix = _NO_LETTER_BEFORE if text[0].isalpha() else ""
    suffix = _NO_LETTER_AFTER if text[-1].isalpha() else ""
    return f"{prefix}{fragment}{suffix}"


def _phrase(text: str) -> str:
    """Escape a keyword, letting any run of whitespace separate its words."""
    return r"\s+".join(re.escape(word) for word in text.split())


class CurrencyRegistry:
    """
    Immutable currency table with precomputed lookups.

    Safe to share across threads: every structure is built in __init__
    and never mutated afterwards.
    """

    def __init__(
        self,
        currencies: Iterable[CurrencyDefinition],
        common_codes: Sequence[str] = DEFAULT_COMMON_CODES,
    ):
        currencies = list(currencies)
        if not currencies:
            raise RegistryError("Currency table is empty")

        by_code: dict[str, CurrencyDefinition] = {}
        for currency in currencies:
            if currency.code in by_code:
                raise RegistryError(f"Duplicate currency code: {currency.code}")
            by_code[currency.code] = currency

        common = []
        for code in common_codes:
            code = code.strip().upper()
            if code in by_code and code not in common:
                common.append(code)
        others = sorted(code for code in by_code if code not in common)
        ordered = common + others

        self._common_codes = tuple(common)
        self._rank = {code: index for index, code in enumerate(ordered)}
        self._currencies = tuple(by_code[code] for code in ordered)
        self._by_code = by_code

        self._symbol_to_codes = self._index(
            (currency.symbol.lower(), currency.code) for currency in self._currencies
        )
        self._keyword_to_codes = self._index(
            (keyword, currency.code)
            for currency in self._currencies
            for keyword in currency.keywords
        )
        self._longest_keyword = max(
            len(keyword.split()) for keyword in self._keyword_to_codes
        )

        self._symbol_pattern = self._build_symbol_pattern()
        self._adjacent_symbol_pattern = self._build_adjacent_symbol_pattern()
        self._code_pattern = self._build_code_pattern(ordered)
        self._keyword_pattern = self._build_keyword_pattern()

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _index(pairs: Iterable[tuple[str, str]]) -> dict[str, tuple[str, ...]]:
        index: dict[str, list[str]] = {}
        for key, code in pairs:
            codes = index.setdefault(key, [])
            if code not in codes:
                codes.append(code)
        return {key: tuple(codes) for key, codes in index.items()}

    def _symbols_longest_first(self) -> list[str]:
        return sorted(self._symbol_to_codes, key=lambda s: (-len(s), s))

    def _build_symbol_pattern(self) -> re.Pattern:
        """
        Pattern used to rewrite symbols to ISO codes.

        Symbols with punctuation ("$", "A$", "Fr.") match anywhere.
        Purely alphabetic symbols ("kr", "lei", "R") only match next to
        digits. Whitespace between a symbol and its digits is consumed.
        """
        alternatives = []
        for symbol in self._symbols_longest_first():
            escaped = re.escape(symbol)
            if symbol.isalpha():
                alternatives.append(
                    r"(?<=\d)\s*" + escaped + _NO_LETTER_AFTER
                )
                alternatives.append(
                    _NO_LETTER_BEFORE + escaped + r"\s*(?=\d)"
                )
            else:
                alternatives.append(
                    r"(?:(?<=\d)\s+)?" + _guarded(escaped, symbol) + r"(?:\s+(?=\d))?"
                )
        return re.compile("|".join(alternatives), re.IGNORECASE)

    def _build_adjacent_symbol_pattern(self) -> re.Pattern:
        """Pattern matching a symbol directly before or after digits."""
        alternation = "|".join(
            _guarded(re.escape(symbol), symbol)
            for symbol in self._symbols_longest_first()
        )
        return re.compile(
            rf"(?P<before>{alternation})\s*(?=\d)|(?<=\d)\s*(?P<after>{alternation})",
            re.IGNORECASE,
        )

    @staticmethod
    def _build_code_pattern(codes: Sequence[str]) -> re.Pattern:
        """
        Pattern matching an ISO code directly before or after digits.

        "50 AED", "usd50" and "75 gbp" match. A code standing alone as a
        word ("try", "cad") does not: those words are left to the keyword
        scan, where a longer currency name outranks them.
        """
        alternation = "|".join(re.escape(code) for code in codes)
        return re.compile(
            rf"{_NO_LETTER_BEFORE}(?P<before>{alternation})\s*(?=\d)"
            rf"|(?<=\d)\s*(?P<after>{alternation}){_NO_LETTER_AFTER}",
            re.IGNORECASE,
        )

    def _build_keyword_pattern(self) -> re.Pattern:
        """
        Overlapping keyword scan.

        Wrapped in a lookahead so every start position is tried, which lets
        the detector see "swiss francs" and "francs" as separate candidates.
        """
        keywords = sorted(self._keyword_to_codes, key=lambda k: (-len(k), k))
        alternatives = []
        for keyword in keywords:
            fragment = _phrase(keyword)
            if keyword[-1].isalpha():
                fragment += "s?"
            alternatives.append(_guarded(fragment, keyword))
        return re.compile(
            "(?=(" + "|".join(alternatives) + "))",
            re.IGNORECASE,
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def currencies(self) -> tuple[CurrencyDefinition, ...]:
        """All currencies in rank order."""
        return self._currencies

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(currency.code for currency in self._currencies)

    @property
    def common_codes(self) -> tuple[str, ...]:
        return self._common_codes

    @property
    def symbol_pattern(self) -> re.Pattern:
        return self._symbol_pattern

    @property
    def adjacent_symbol_pattern(self) -> re.Pattern:
        return self._adjacent_symbol_pattern

    @property
    def code_pattern(self) -> re.Pattern:
        return self._code_pattern

    @property
    def keyword_pattern(self) -> re.Pattern:
        return self._keyword_pattern

    def get(self, code: Optional[str]) -> Optional[CurrencyDefinition]:
        if not code:
            return None
        return self._by_code.get(code.strip().upper())

    def rank(self, code: str) -> int:
        """Position in the tie-break order; unknown codes sort last."""
        return self._rank.get(code.upper(), len(self._rank))

    def is_common(self, code: str) -> bool:
        return code.upper() in self._common_codes

    def codes_for_symbol(self, symbol: str) -> tuple[str, ...]:
        return self._symbol_to_codes.get(symbol.strip().lower(), ())

    def codes_for_keyword(self, keyword: str) -> tuple[str, ...]:
        """
        Codes for a keyword as spoken.

        Accepts the plural form ("dirhams") and any inner whitespace.
        """
        normalized = " ".join(keyword.lower().split())
        codes = self._keyword_to_codes.get(normalized)
        if codes is None and normalized.endswith("s"):
            codes = self._keyword_to_codes.get(normalized[:-1])
        return codes or ()

    def names_currency_at(self, words: Sequence[str], index: int) -> bool:
        """
        True when words[index] is part of a currency code or keyword.

        Words must be lowercased. Multi-word keywords are matched in
        place, so "canadian" counts in "40 canadian dollars" but not
        in "a canadian cafe".
        """
        if index < 0 or index >= len(words):
            return False
        for size in range(1, self._longest_keyword + 1):
            for start in range(max(0, index - size + 1), index + 1):
                if start + size > len(words):
                    break
                if self.codes_for_keyword(" ".join(words[start:start + size])):
                    return True
        return False

    def find_by_region(self, region: str) -> Optional[str]:
        """Best-ranked currency whose locale belongs to the region."""
        region = region.strip().upper()
        for currency in self._currencies:
            if currency.region == region:
                return currency.code
        return None

    def spoken_name(self, code: str) -> str:
        """
        Name a user would say for the currency, e.g. "dirham".

        Picks the first natural-language keyword that resolves back to
        this currency, so CAD is "canadian dollar" rather than "dollar".
        """
        currency = self.get(code)
        if currency is None:
            raise KeyError(code)
        for keyword in currency.keywords:
            if keyword in (currency.code.lower(), currency.symbol.lower()):
                continue
            if not keyword.replace(" ", "").isalpha():
                continue
            codes = self._keyword_to_codes.get(keyword, ())
            if codes and codes[0] == currency.code:
                return keyword
        return currency.display_name.lower()

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._by_code

    def __iter__(self) -> Iterator[CurrencyDefinition]:
        return iter(self._currencies)

    def __len__(self) -> int:
        return len(self._currencies)

    def __repr__(self) -> str:
        return f"CurrencyRegistry({len(self)} currencies, common={list(self._common_codes)})"

    @classmethod
    def from_table(
        cls,
        table: CurrencyTable,
        common_codes: Sequence[str] = DEFAULT_COMMON_CODES,
    ) -> "CurrencyRegistry":
        return cls(table.currencies, common_codes=common_codes)


# =============================================================================
# LOADING
# =============================================================================

def _read_table(path: Optional[Union[str, Path]]) -> tuple[dict, str]:
    if path is None:
        source = resources.files("voice_expense.data").joinpath("currencies.json")
        return json.loads(source.read_text(encoding="utf-8")), "packaged:currencies.json"

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Currency table not found: {file_path}")
    return json.loads(file_path.read_text(encoding="utf-8")), str(file_path)


def load_currency_registry(
    path: Optional[Union[str, Path]] = None,
    common_codes: Optional[Sequence[str]] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> CurrencyRegistry:
    """
    Load and validate a currency table.

    Args:
        path: JSON file to read. The packaged table is used when None.
        common_codes: Codes that win keyword ties, in priority order.
        audit_logger: Receives a registry_loaded event.

    Raises:
        FileNotFoundError: path does not exist
        pydantic.ValidationError: a currency record is malformed
        RegistryError: the table is empty or has duplicate codes
    """
    raw, source = _read_table(path)
    table = CurrencyTable.model_validate(raw)

    registry = CurrencyRegistry.from_table(
        table,
        common_codes=common_codes if common_codes is not None else DEFAULT_COMMON_CODES,
    )

    if audit_logger is not None:
        audit_logger.log_registry_loaded(
            source=source,
            currency_count=len(registry),
            version=table.version,
        )

    return registry
