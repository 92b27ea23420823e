"""
Number Phrase Parser

Turns spoken number phrases into Decimal values:
    "two thousand five hundred"  -> 2500
    "five lakh fifty thousand"   -> 550000
    "two point five million"     -> 2500000
    "five dollars and fifty cents" -> 5.50
    "1,250.75"                   -> 1250.75

DESIGN DECISION: Two-register accumulation.
`group` collects units, teens, tens and "hundred"; every larger scale word
folds the group into `total`. Indian (lakh, crore) and Western (thousand,
million) scales therefore combine additively without special cases.

Words that cannot combine into one magnitude ("five five",
"twenty thirty", "thousand million") make the phrase AMBIGUOUS.
We refuse to guess: ambiguous phrases parse to None.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, NamedTuple, Optional, Sequence, Union


# =============================================================================
# VOCABULARY
# =============================================================================

UNITS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4,
    "five": 5, "six": 6, "seven": 7, "eight": 8, "nine": 9,
}

TEENS = {
    "ten": 10, "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
    "nineteen": 19,
}

TENS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}

HUNDRED_WORDS = {"hundred", "hundreds"}

SCALES = {
    "thousand": 10 ** 3, "thousands": 10 ** 3,
    "lakh": 10 ** 5, "lakhs": 10 ** 5, "lac": 10 ** 5, "lacs": 10 ** 5,
    "million": 10 ** 6, "millions": 10 ** 6,
    "crore": 10 ** 7, "crores": 10 ** 7,
    "billion": 10 ** 9, "billions": 10 ** 9,
    "trillion": 10 ** 12, "trillions": 10 ** 12,
}

CENTS_WORDS = {"cent", "cents", "paise", "paisa"}

# Verbs that introduce the amount: "spent fifty", "paid 20"
AMOUNT_CUES = {
    "spent", "spend", "paid", "pay", "cost", "costs",
    "bought", "buy", "purchase", "purchased",
}

POINT_WORD = "point"
AND_WORD = "and"
ARTICLES = {"a", "an"}

NUMBER_WORDS = set(UNITS) | set(TEENS) | set(TENS) | HUNDRED_WORDS | set(SCALES)

_NUMERIC_RE = re.compile(r"[\d,]*\.?\d*")
_TOKEN_RE = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?|[^\W\d_]+")


class AmbiguousNumberPhraseError(ValueError):
    """Raised when number words cannot combine into a single value."""


class NumberRun(NamedTuple):
    """A run of number tokens and where it sits in the sentence."""
    tokens: list[str]
    start: int  # index of the first token
    end: int  # index just past the last token


class AmountScan(NamedTuple):
    """Result of scanning a sentence for an amount."""
    amount: Optional[Decimal]
    has_number_words: bool
    ambiguous: bool


def _is_numeral(token: str) -> bool:
    return token[0].isdigit()


def _to_decimal(numeral: str) -> Decimal:
    return Decimal(numeral.replace(",", ""))


def _is_scale(token: str) -> bool:
    return token in SCALES or token in HUNDRED_WORDS


def _is_core(token: str) -> bool:
    """A token that carries a value by itself."""
    return _is_numeral(token) or token in NUMBER_WORDS


def tokenize(text: str) -> list[str]:
    """Split text into lowercased words and numerals."""
    return _TOKEN_RE.findall(text.lower())


# =============================================================================
# EVALUATION
# =============================================================================

def _evaluate_plain(tokens: list[str]) -> Decimal:
    """
    Evaluate a run of number tokens without a cents part.

    Raises AmbiguousNumberPhraseError if the words don't combine.
    """
    total = Decimal(0)
    group = Decimal(0)
    last: Optional[str] = None
    fraction: Optional[str] = None  # digits after "point", None outside fraction

    def fold_fraction() -> None:
        nonlocal group, fraction
        if fraction is not None:
            if not fraction:
                raise AmbiguousNumberPhraseError("'point' without digits")
            group += Decimal("0." + fraction)
            fraction = None

    for index, token in enumerate(tokens):
        if token == AND_WORD:
            continue

        if fraction is not None:
            if token in UNITS:
                fraction += str(UNITS[token])
                last = "fraction"
                continue
            if _is_numeral(token) and token.isdigit():
                fraction += token
                last = "fraction"
                continue
            if not _is_scale(token):
                raise AmbiguousNumberPhraseError(f"'{token}' after 'point'")
            fold_fraction()

        if token in ARTICLES:
            nxt = tokens[index + 1] if index + 1 < len(tokens) else None
            if nxt is None or not _is_scale(nxt) or last not in (None, "scale"):
                raise AmbiguousNumberPhraseError(f"'{token}' is not a number here")
            group = Decimal(1)
            last = "unit"

        elif _is_numeral(token):
            if last not in (None, "scale", "hundred"):
                raise AmbiguousNumberPhraseError(f"'{token}' follows another number")
            group += _to_decimal(token)
            last = "numeral"

        elif token in UNITS:
            if last not in (None, "scale", "hundred", "tens"):
                raise AmbiguousNumberPhraseError(f"'{token}' follows another number")
            group += UNITS[token]
            last = "unit"

        elif token in TEENS:
            if last not in (None, "scale", "hundred"):
                raise AmbiguousNumberPhraseError(f"'{token}' follows another number")
            group += TEENS[token]
            last = "teen"

        elif token in TENS:
            if last not in (None, "scale", "hundred"):
                raise AmbiguousNumberPhraseError(f"'{token}' follows another number")
            group += TENS[token]
            last = "tens"

        elif token in HUNDRED_WORDS:
            if last in ("hundred", "scale"):
                raise AmbiguousNumberPhraseError(f"'{token}' follows a scale word")
            group = (group or Decimal(1)) * 100
            last = "hundred"

        elif token in SCALES:
            if last == "scale":
                raise AmbiguousNumberPhraseError(f"'{token}' follows a scale word")
            total += (group or Decimal(1)) * SCALES[token]
            group = Decimal(0)
            last = "scale"

        elif token == POINT_WORD:
            fraction = ""
            last = "point"

        else:
            raise AmbiguousNumberPhraseError(f"'{token}' is not a number word")

    fold_fraction()

    if last is None:
        raise AmbiguousNumberPhraseError("no number words")

    return total + group


def evaluate_tokens(tokens: list[str]) -> Decimal:
    """
    Evaluate a run of number tokens, including a trailing cents part.

    "five and fifty cents" -> 5.50: the cents value is the segment
    after the last "and" (or the whole run when there is none).
    """
    cents_at = next(
        (i for i, token in enumerate(tokens) if token in CENTS_WORDS),
        None,
    )
    if cents_at is None:
        return _evaluate_plain(tokens)

    if any(_is_core(token) for token in tokens[cents_at + 1:]):
        raise AmbiguousNumberPhraseError("numbers after the cents word")

    head = tokens[:cents_at]
    and_positions = [i for i, token in enumerate(head) if token == AND_WORD]
    if and_positions:
        split = and_positions[-1]
        main_tokens, cents_tokens = head[:split], head[split + 1:]
    else:
        main_tokens, cents_tokens = [], head

    if not any(_is_core(token) for token in cents_tokens):
        raise AmbiguousNumberPhraseError("cents word without a number")

    cents = _evaluate_plain(cents_tokens)
    if cents >= 100 or cents != cents.to_integral_value():
        raise AmbiguousNumberPhraseError(f"{cents} is not a cents value")

    main = Decimal(0)
    if any(_is_core(token) for token in main_tokens):
        main = _evaluate_plain(main_tokens)

    return main + cents / 100


# =============================================================================
# PARSER
# =============================================================================

class NumberPhraseParser:
    """
    Stateless parser for spoken and written amounts.

    Safe to share across threads.
    """

    def parse(self, phrase: Optional[str]) -> Optional[Decimal]:
        """
        Parse a number phrase.

        Returns None for empty input, when no number is present,
        or when the phrase is ambiguous. Unknown words are skipped.
        """
        if phrase is None:
            return None

        text = phrase.strip()
        if not text:
            return None

        # Fast path: plain digits with optional separators and decimals
        if _NUMERIC_RE.fullmatch(text) and any(c.isdigit() for c in text):
            try:
                return _to_decimal(text)
            except InvalidOperation:
                return None

        tokens = self._number_tokens(tokenize(text))
        if not any(_is_core(token) for token in tokens):
            return None

        try:
            return evaluate_tokens(tokens)
        except AmbiguousNumberPhraseError:
            return None

    def scan(
        self,
        text: Optional[str],
        names_currency_at: Optional[Callable[[Sequence[str], int], bool]] = None,
    ) -> AmountScan:
        """
        Find the amount in a sentence.

        Of the runs that resolve, the first one next to a currency word
        wins, then the first one right after a verb such as "spent" or
        "paid", then the first one in text order. Currency words are only
        recognised when `names_currency_at(words, index)` is given.

        Also reports whether number words were present but none of the
        number runs could be resolved.
        """
        if not text or not text.strip():
            return AmountScan(amount=None, has_number_words=False, ambiguous=False)

        tokens = tokenize(text)
        has_number_words = any(_is_core(token) for token in tokens)
        saw_ambiguous = False

        resolved: list[tuple[NumberRun, Decimal]] = []
        for run in self._find_runs(tokens):
            try:
                resolved.append((run, evaluate_tokens(run.tokens)))
            except AmbiguousNumberPhraseError:
                saw_ambiguous = True

        if resolved:
            return AmountScan(
                amount=self._pick(tokens, resolved, names_currency_at),
                has_number_words=True,
                ambiguous=False,
            )

        return AmountScan(
            amount=None,
            has_number_words=has_number_words,
            ambiguous=saw_ambiguous,
        )

    def extract_amount_from_command(self, text: Optional[str]) -> Optional[Decimal]:
        """
        Extract the amount from a full voice command.

        "I just spent two thousand dirhams on groceries" -> 2000
        """
        return self.scan(text).amount

    def contains_number_phrase(self, text: Optional[str]) -> bool:
        """True when the text contains a spoken number or scale word."""
        if not text:
            return False
        return any(token in NUMBER_WORDS for token in tokenize(text))

    def validate(self, phrase: str, expected: Union[Decimal, int, float, str]) -> bool:
        """Check that a phrase parses to the expected value."""
        result = self.parse(phrase)
        if result is None:
            return False
        return result == Decimal(str(expected))

    @staticmethod
    def example_phrases() -> dict[str, Decimal]:
        """Canonical phrases and the values they must parse to."""
        return {
            # Basic numbers
            "five": Decimal("5"),
            "fifteen": Decimal("15"),
            "twenty": Decimal("20"),
            "twenty five": Decimal("25"),
            "ninety nine": Decimal("99"),
            # Hundreds
            "one hundred": Decimal("100"),
            "two hundred": Decimal("200"),
            "five hundred and fifty": Decimal("550"),
            "nine hundred ninety nine": Decimal("999"),
            # Thousands
            "one thousand": Decimal("1000"),
            "two thousand": Decimal("2000"),
            "ten thousand": Decimal("10000"),
            "twenty five thousand": Decimal("25000"),
            "one hundred thousand": Decimal("100000"),
            "two thousand five hundred": Decimal("2500"),
            # Lakhs
            "one lakh": Decimal("100000"),
            "five lakh": Decimal("500000"),
            "ten lakh": Decimal("1000000"),
            "twenty five lakh": Decimal("2500000"),
            # Crores
            "one crore": Decimal("10000000"),
            "two crore": Decimal("20000000"),
            "five crore": Decimal("50000000"),
            # Millions
            "one million": Decimal("1000000"),
            "two million": Decimal("2000000"),
            "five million": Decimal("5000000"),
            "ten million": Decimal("10000000"),
            # Billions
            "one billion": Decimal("1000000000"),
            "two billion": Decimal("2000000000"),
            # Combinations
            "two thousand five hundred and fifty": Decimal("2550"),
            "one million two hundred thousand": Decimal("1200000"),
            "five lakh fifty thousand": Decimal("550000"),
            # Decimals
            "five point five": Decimal("5.5"),
            "two point five million": Decimal("2500000"),
            "one point two five": Decimal("1.25"),
            # "and" connector
            "one hundred and twenty": Decimal("120"),
            "two thousand and five": Decimal("2005"),
        }

    # -------------------------------------------------------------------------
    # Run detection
    # -------------------------------------------------------------------------

    @staticmethod
    def _number_tokens(tokens: list[str]) -> list[str]:
        """Keep only tokens that can take part in a number phrase."""
        kept = []
        for index, token in enumerate(tokens):
            if _is_core(token) or token in CENTS_WORDS:
                kept.append(token)
            elif token in (AND_WORD, POINT_WORD):
                kept.append(token)
            elif token in ARTICLES:
                nxt = tokens[index + 1] if index + 1 < len(tokens) else None
                if nxt is not None and _is_scale(nxt):
                    kept.append(token)
        return kept

    @staticmethod
    def _pick(
        tokens: list[str],
        resolved: list[tuple[NumberRun, Decimal]],
        names_currency_at: Optional[Callable[[Sequence[str], int], bool]],
    ) -> Decimal:
        """Value of the preferred run, in the order scan() describes."""
        if names_currency_at is not None:
            for run, value in resolved:
                if names_currency_at(tokens, run.start - 1) or names_currency_at(tokens, run.end):
                    return value

        for run, value in resolved:
            if run.start > 0 and tokens[run.start - 1] in AMOUNT_CUES:
                return value

        return resolved[0][1]

    @staticmethod
    def _find_runs(tokens: list[str]) -> list[NumberRun]:
        """
        Split a sentence into maximal runs of number tokens.

        "and" joins two number words, "point" joins a number to its
        digits, "a"/"an" count only before a scale word. A trailing
        "<word> [and] N cents" after a run is folded into that run so
        "five dollars and fifty cents" reads as 5.50.
        """
        def is_number_at(i: int) -> bool:
            return i < len(tokens) and _is_core(tokens[i])

        runs: list[NumberRun] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            starts_run = _is_core(token) or (
                token in ARTICLES and i + 1 < len(tokens) and _is_scale(tokens[i + 1])
            ) or (token == POINT_WORD and is_number_at(i + 1))
            if not starts_run:
                i += 1
                continue

            start = i
            run: list[str] = []
            while i < len(tokens):
                token = tokens[i]
                if _is_core(token):
                    run.append(token)
                elif token in ARTICLES and i + 1 < len(tokens) and _is_scale(tokens[i + 1]):
                    run.append(token)
                elif token in (AND_WORD, POINT_WORD) and run and is_number_at(i + 1):
                    run.append(token)
                elif token == POINT_WORD and not run and is_number_at(i + 1):
                    run.append(token)
                elif token in CENTS_WORDS and run:
                    run.append(token)
                    i += 1
                    break
                else:
                    break
                i += 1

            if run and run[-1] not in CENTS_WORDS:
                cents_tail, consumed = NumberPhraseParser._trailing_cents(tokens, i)
                if cents_tail:
                    run = run + [AND_WORD] + cents_tail
                    i += consumed

            runs.append(NumberRun(run, start, i))
        return runs

    @staticmethod
    def _trailing_cents(tokens: list[str], start: int) -> tuple[list[str], int]:
        """
        Look for "<word> [and] N cents" right after a run.

        Returns the cents tokens and how many tokens they span.
        """
        if start >= len(tokens) or _is_core(tokens[start]):
            return [], 0
        i = start + 1  # skip the currency word
        if i < len(tokens) and tokens[i] == AND_WORD:
            i += 1
        cents_tokens = []
        while i < len(tokens) and (_is_core(tokens[i]) or tokens[i] == AND_WORD):
            cents_tokens.append(tokens[i])
            i += 1
        if (
            cents_tokens
            and AND_WORD not in cents_tokens
            and i < len(tokens)
            and tokens[i] in CENTS_WORDS
        ):
            return cents_tokens + [tokens[i]], i + 1 - start
        return [], 0
