"""
Core Data Models for Voice Expense

These models define the strict schemas for everything a parse produces.
They are designed to:
1. Enforce type safety at runtime
2. Make a failed parse a value, not an exception
3. Be serializable for logging and the host application
4. Never represent a half-parsed command

DESIGN DECISION: A ParseResult carries EITHER a command OR an error.
The model validator rejects any other combination, so callers can
branch on is_success without defensive checks.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: A closed set keeps reports consistent.
    Anything the classifier can't place lands in OTHER.
    """
    FOOD_AND_DINING = "Food & Dining"
    GROCERY = "Grocery"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS_AND_UTILITIES = "Bills & Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"


class CurrencyResolution(str, Enum):
    """Where the currency of a command came from."""
    SYMBOL = "symbol"      # "$50"
    CODE = "code"          # "50 AED"
    KEYWORD = "keyword"    # "fifty dirhams"
    DEFAULT = "default"    # caller-supplied default
    LOCALE = "locale"      # region of the device locale


class ParseErrorKind(str, Enum):
    """
    Why a transcript could not become a command.

    Every kind is recoverable: the host re-prompts the user.
    """
    EMPTY_INPUT = "empty_input"
    MISSING_AMOUNT = "missing_amount"
    AMBIGUOUS_NUMBER_PHRASE = "ambiguous_number_phrase"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"
    UNRESOLVED_CURRENCY = "unresolved_currency"


# =============================================================================
# PARSED COMMAND
# =============================================================================

class ExpenseCommand(BaseModel):
    """
    A fully parsed expense.

    CRITICAL: Only built once amount AND currency are known and valid.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount in the command's currency"
    )
    currency_code: str = Field(
        ...,
        pattern=r"^[A-Z]{3}$",
        description="ISO 4217 currency code"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
        description="Expense category"
    )
    merchant: Optional[str] = Field(
        default=None,
        min_length=2,
        description="Merchant named in the transcript"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes, e.g. what the expense was for"
    )
    raw_transcript: str = Field(
        ...,
        min_length=1,
        description="Transcript exactly as received"
    )
    transaction_date: date = Field(
        default_factory=date.today,
        description="Day the expense happened"
    )
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="How strongly the transcript looked like an expense command"
    )
    source: str = Field(
        default="voice_assistant",
        description="Origin of the command"
    )
    currency_match: CurrencyResolution = Field(
        ...,
        description="How the currency was resolved"
    )

    @field_validator('currency_code')
    @classmethod
    def uppercase_currency(cls, v: str) -> str:
        return v.upper()

    def to_log_dict(self) -> dict:
        """Flat dict for structured logging."""
        return {
            "amount": str(self.amount),
            "currency_code": self.currency_code,
            "category": self.category.value,
            "merchant": self.merchant,
            "transaction_date": self.transaction_date.isoformat(),
            "confidence": self.confidence,
            "currency_match": self.currency_match.value,
        }


class ParseError(BaseModel):
    """A typed parse failure with a hint the host can show or speak."""

    kind: ParseErrorKind
    message: str = Field(
        ...,
        description="Human-readable description of what went wrong"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="What the user could say instead"
    )
    transcript: Optional[str] = Field(
        default=None,
        description="Transcript that failed"
    )


class ParseResult(BaseModel):
    """
    Outcome of processing one transcript.

    Exactly one of command / error is set.
    """

    command: Optional[ExpenseCommand] = None
    error: Optional[ParseError] = None

    @model_validator(mode='after')
    def exactly_one_outcome(self) -> 'ParseResult':
        if (self.command is None) == (self.error is None):
            raise ValueError("ParseResult needs exactly one of command or error")
        return self

    @property
    def is_success(self) -> bool:
        return self.command is not None

    @classmethod
    def success(cls, command: ExpenseCommand) -> 'ParseResult':
        return cls(command=command)

    @classmethod
    def failure(
        cls,
        kind: ParseErrorKind,
        message: str,
        suggested_fix: Optional[str] = None,
        transcript: Optional[str] = None,
    ) -> 'ParseResult':
        return cls(
            error=ParseError(
                kind=kind,
                message=message,
                suggested_fix=suggested_fix,
                transcript=transcript,
            )
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'unknown_currency', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (amount and currency present and known)
    Stage 2: Semantic validation (range checks)
    """

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Correlation ID of the parse being validated"
    )
    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    # Stage results
    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def first_error(self) -> Optional[ValidationIssue]:
        """First error-level issue, in the order found."""
        for issue in self.issues:
            if issue.severity == "error":
                return issue
        return None
