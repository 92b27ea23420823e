"""
Expense Details

Everything in a transcript beyond amount, currency and category:
merchant ("at Carrefour"), notes ("for the team lunch") and the
day the expense happened ("yesterday").

All extraction here is best effort. A missing detail never fails a parse.
"""

import re
from datetime import date, timedelta
from typing import Optional

from voice_expense.parsing.category import CategoryClassifier


MERCHANT_PREPOSITIONS = ("at", "from")

# Words that end a merchant name
MERCHANT_STOP_WORDS = frozenset({
    "for", "on", "in", "with", "using", "by",
    "yesterday", "today", "tonight", "this", "last",
})

LEADING_ARTICLES = frozenset({"the"})

_MERCHANT_START_RE = re.compile(r"\b(?:at|from)\s+", re.IGNORECASE)
_WORD_RE = re.compile(r"[^\s.,;:!?]+|[.,;:!?]")
_NOTES_RE = re.compile(r"\bfor\s+(.+)$", re.IGNORECASE | re.DOTALL)
_NOTE_LABEL_RE = re.compile(r"\bnote:\s*(.+)$", re.IGNORECASE | re.DOTALL)

# Checked in order: longer phrases first
RELATIVE_DAYS = (
    (re.compile(r"\bday\s+before\s+yesterday\b", re.IGNORECASE), 2),
    (re.compile(r"\byesterday\b", re.IGNORECASE), 1),
    (re.compile(r"\blast\s+night\b", re.IGNORECASE), 1),
)


class DetailExtractor:
    """Merchant, notes and transaction date extraction."""

    def __init__(
        self,
        classifier: Optional[CategoryClassifier] = None,
        merchant_max_length: int = 100,
        notes_max_length: int = 500,
    ):
        self._classifier = classifier or CategoryClassifier()
        self._merchant_max_length = merchant_max_length
        self._notes_max_length = notes_max_length

    def extract_merchant(self, text: Optional[str]) -> Optional[str]:
        """
        Merchant named after "at" or "from", original casing kept.

        "paid 100 dollars at Amazon" -> "Amazon"
        "spent 50 at Carrefour for groceries" -> "Carrefour"
        """
        if not text:
            return None

        for start in _MERCHANT_START_RE.finditer(text):
            merchant = self._merchant_from(text, start.end())
            if merchant:
                return merchant
        return None

    def _merchant_from(self, text: str, position: int) -> Optional[str]:
        words: list[str] = []
        for found in _WORD_RE.finditer(text, position):
            word = found.group(0)
            lowered = word.lower()

            if not word[0].isalnum() and len(word) == 1:
                break  # punctuation
            if any(c.isdigit() for c in word):
                break
            if lowered in MERCHANT_STOP_WORDS:
                break
            if not words and lowered in LEADING_ARTICLES:
                continue
            if words and self._classifier.keyword_pattern.match(text, found.start()):
                break
            words.append(word)

        merchant = " ".join(words)
        if len(merchant) < 2:
            return None
        if len(merchant) > self._merchant_max_length:
            merchant = merchant[:self._merchant_max_length].rstrip()
        return merchant

    def extract_notes(self, text: Optional[str]) -> Optional[str]:
        """
        Free-form notes: "note: ..." or everything after "for".
        """
        if not text:
            return None

        for pattern in (_NOTE_LABEL_RE, _NOTES_RE):
            found = pattern.search(text)
            if found:
                note = found.group(1).strip().rstrip(".!?").strip()
                if note and len(note) <= self._notes_max_length:
                    return note
        return None

    def extract_transaction_date(
        self,
        text: Optional[str],
        today: Optional[date] = None,
    ) -> date:
        """Day of the expense: relative day words, otherwise today."""
        today = today or date.today()
        if not text:
            return today

        for pattern, days_back in RELATIVE_DAYS:
            if pattern.search(text):
                return today - timedelta(days=days_back)
        return today
