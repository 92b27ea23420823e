"""
Currency Models for Voice Expense

The currency table is DATA, not code: one flat record per currency,
loaded from JSON once at startup. The ISO 4217 code is the tag that
identifies a currency everywhere else in the system.
"""

from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class MatchKind(str, Enum):
    """How a currency was found in a transcript."""
    SYMBOL = "symbol"    # "$50", "₹ 20"
    CODE = "code"        # "50 AED"
    KEYWORD = "keyword"  # "fifty dirhams", "swiss francs"


# =============================================================================
# CURRENCY TABLE
# =============================================================================

class CurrencyDefinition(BaseModel):
    """
    A single currency record.

    INVARIANT: keywords always include the ISO code and the symbol,
    lowercased, in configuration order, without duplicates.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    code: str = Field(
        ...,
        pattern=r"^[A-Za-z]{3}$",
        description="ISO 4217 currency code"
    )
    symbol: str = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Currency symbol as written"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("display_name", "displayName"),
        description="English currency name"
    )
    short_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("short_name", "shortName"),
    )
    locale: str = Field(
        default="en_US",
        validation_alias=AliasChoices("locale", "localeIdentifier"),
        description="Locale identifier, e.g. ar_AE"
    )
    is_rtl: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_rtl", "isRTL"),
        description="Whether the currency is written right-to-left"
    )
    keywords: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("keywords", "voiceKeywords"),
        description="Spoken and written forms used for detection"
    )

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode='after')
    def normalize_keywords(self) -> 'CurrencyDefinition':
        """Lowercase keywords and make sure code and symbol are present."""
        seen = []
        for keyword in (self.code, self.symbol, *self.keywords):
            normalized = " ".join(keyword.lower().split())
            if normalized and normalized not in seen:
                seen.append(normalized)
        # frozen model: bypass __setattr__
        object.__setattr__(self, "keywords", tuple(seen))
        return self

    @property
    def region(self) -> Optional[str]:
        """Territory part of the locale identifier (AE for ar_AE)."""
        parts = self.locale.replace("-", "_").split("_")
        if len(parts) >= 2 and parts[-1]:
            return parts[-1].upper()
        return None


class CurrencyTable(BaseModel):
    """Root structure of currencies.json."""
    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(default="1.0")
    last_updated: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("last_updated", "lastUpdated"),
    )
    currencies: list[CurrencyDefinition] = Field(
        ...,
        description="All currency records"
    )


# =============================================================================
# DETECTION RESULT
# =============================================================================

class DetectedCurrency(BaseModel):
    """Result of currency detection for one transcript."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., pattern=r"^[A-Z]{3}$")
    match_kind: MatchKind
    matched_text: str = Field(
        ...,
        description="The exact text that produced the match"
    )
