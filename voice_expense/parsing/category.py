"""
Category Classification

Maps a transcript to one of the fixed expense categories by keyword.

DESIGN DECISION: We use simple keyword matching rather than ML because:
1. It's deterministic and explainable
2. The vocabulary of spoken expenses is small
3. It runs instantly on every transcript

The longest matching keyword wins, so "food shopping" is Grocery even
though "food" alone is Food & Dining. Equal lengths go to table order.
"""

import re
from typing import Optional

from voice_expense.models.expense import ExpenseCategory


CATEGORY_KEYWORDS: dict[ExpenseCategory, tuple[str, ...]] = {
    ExpenseCategory.FOOD_AND_DINING: (
        "food", "tea", "coffee", "lunch", "dinner", "breakfast", "restaurant",
        "meal", "drink", "cafe", "dining", "eat", "ate", "snack", "brunch",
        "takeout", "takeaway", "delivery", "pizza", "burger", "sandwich",
        "sushi", "dessert", "ice cream", "bakery", "starbucks", "mcdonald",
    ),
    ExpenseCategory.GROCERY: (
        "grocery", "groceries", "supermarket", "market", "food shopping",
        "vegetables", "fruits", "produce", "walmart", "carrefour", "lulu",
    ),
    ExpenseCategory.TRANSPORTATION: (
        "gas", "fuel", "taxi", "uber", "transport", "transportation", "parking",
        "petrol", "toll", "careem", "lyft", "metro", "subway", "train", "bus",
        "diesel", "station", "refuel", "fill up", "car", "vehicle", "ride",
        "trip", "travel", "flight", "airline", "ticket",
    ),
    ExpenseCategory.SHOPPING: (
        "shopping", "clothes", "clothing", "store", "mall", "purchase", "buy",
        "bought", "shoes", "accessories", "fashion", "retail", "amazon",
        "online shopping", "electronics", "gadget", "laptop",
    ),
    ExpenseCategory.ENTERTAINMENT: (
        "movie", "cinema", "concert", "entertainment", "fun", "games",
        "theatre", "sports", "gym", "fitness", "netflix", "streaming",
        "spotify", "music", "hobby", "recreation", "amusement", "park",
    ),
    ExpenseCategory.BILLS_AND_UTILITIES: (
        "bill", "bills", "rent", "utility", "utilities", "electricity", "water",
        "internet", "phone", "subscription", "insurance", "mortgage", "loan",
        "payment", "recurring", "monthly", "annual",
    ),
    ExpenseCategory.HEALTHCARE: (
        "healthcare", "health", "doctor", "hospital", "medicine", "medical",
        "pharmacy", "clinic", "prescription", "dentist", "therapy", "checkup",
        "emergency", "surgery", "treatment",
    ),
    ExpenseCategory.EDUCATION: (
        "education", "school", "course", "training", "books", "learning",
        "tuition", "college", "university", "class", "workshop", "seminar",
        "certification", "textbook", "supplies", "fees",
    ),
}


class CategoryClassifier:
    """Keyword classifier over the fixed category table."""

    def __init__(
        self,
        keywords: Optional[dict[ExpenseCategory, tuple[str, ...]]] = None,
    ):
        table = keywords if keywords is not None else CATEGORY_KEYWORDS

        self._order: dict[ExpenseCategory, int] = {}
        self._keyword_to_category: dict[str, ExpenseCategory] = {}
        for position, (category, words) in enumerate(table.items()):
            self._order[category] = position
            for word in words:
                self._keyword_to_category.setdefault(word.lower(), category)

        alternatives = []
        for keyword in sorted(self._keyword_to_category, key=lambda k: (-len(k), k)):
            fragment = r"\s+".join(re.escape(part) for part in keyword.split())
            alternatives.append(rf"\b{fragment}s?\b")
        self._pattern = re.compile("(?=(" + "|".join(alternatives) + "))", re.IGNORECASE)

    @property
    def keyword_pattern(self) -> re.Pattern:
        """Overlapping keyword scan; group 1 holds the spoken keyword."""
        return self._pattern

    def match(self, text: Optional[str]) -> Optional[tuple[ExpenseCategory, str]]:
        """
        Best category keyword in the text.

        Returns (category, keyword) or None when nothing matches.
        """
        if not text:
            return None

        best = None
        best_key = None
        for found in self._pattern.finditer(text):
            spoken = found.group(1)
            category = self.category_for_keyword(spoken)
            if category is None:
                continue
            key = (-len(spoken), self._order[category], found.start(1))
            if best_key is None or key < best_key:
                best_key = key
                best = (category, spoken)
        return best

    def classify(self, text: Optional[str]) -> ExpenseCategory:
        """Category for the text, OTHER when no keyword matches."""
        found = self.match(text)
        return found[0] if found else ExpenseCategory.OTHER

    def has_category_keyword(self, text: Optional[str]) -> bool:
        return self.match(text) is not None

    def category_for_keyword(self, spoken: str) -> Optional[ExpenseCategory]:
        normalized = " ".join(spoken.lower().split())
        category = self._keyword_to_category.get(normalized)
        if category is None and normalized.endswith("s"):
            category = self._keyword_to_category.get(normalized[:-1])
        return category
