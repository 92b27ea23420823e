"""
Parsing Package

Turns transcript text into amounts, currencies, categories and details.
"""

from voice_expense.parsing.numbers import (
    AmbiguousNumberPhraseError,
    AmountScan,
    NumberPhraseParser,
)
from voice_expense.parsing.currency import CurrencyDetector
from voice_expense.parsing.category import CATEGORY_KEYWORDS, CategoryClassifier
from voice_expense.parsing.details import DetailExtractor
from voice_expense.parsing.extractor import AmountCurrencyExtractor, Extraction

__all__ = [
    # Numbers
    "AmbiguousNumberPhraseError",
    "AmountScan",
    "NumberPhraseParser",
    # Currency
    "CurrencyDetector",
    # Category
    "CATEGORY_KEYWORDS",
    "CategoryClassifier",
    # Details
    "DetailExtractor",
    # Extraction
    "AmountCurrencyExtractor",
    "Extraction",
]
