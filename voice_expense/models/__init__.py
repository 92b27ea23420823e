"""
Data Models Package

This package contains all Pydantic models used by the voice parsing engine.
Everything a parse produces must conform to these schemas.
"""

from voice_expense.models.currency import (
    CurrencyDefinition,
    CurrencyTable,
    DetectedCurrency,
    MatchKind,
)
from voice_expense.models.expense import (
    CurrencyResolution,
    ExpenseCategory,
    ExpenseCommand,
    ParseError,
    ParseErrorKind,
    ParseResult,
    ValidationIssue,
    ValidationResult,
)
from voice_expense.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Currency models
    "CurrencyDefinition",
    "CurrencyTable",
    "DetectedCurrency",
    "MatchKind",
    # Expense models
    "CurrencyResolution",
    "ExpenseCategory",
    "ExpenseCommand",
    "ParseError",
    "ParseErrorKind",
    "ParseResult",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
