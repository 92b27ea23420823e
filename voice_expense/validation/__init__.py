"""Validation package."""

from voice_expense.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
