"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount present
- Currency present
- Currency known to the registry

STAGE 2 - SEMANTIC VALIDATION:
- Amount strictly positive
- Amount within the configured maximum
- Suspiciously small amounts (warning only)

Stage 2 is skipped when stage 1 fails.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the processor can return a typed error.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from voice_expense.config import ParserSettings, get_settings
from voice_expense.models.expense import ValidationIssue, ValidationResult
from voice_expense.registry.currency_registry import CurrencyRegistry


class ExpenseValidator:
    """
    Validates an extracted (amount, currency) pair.

    Stage 1: Schema validation
    Stage 2: Semantic validation
    """

    def __init__(
        self,
        registry: CurrencyRegistry,
        settings: Optional[ParserSettings] = None,
    ):
        """
        Initialize validator.

        Args:
            registry: Currencies considered valid.
            settings: Parser limits. Loaded from the environment if None.
        """
        self._registry = registry
        self._settings = settings or get_settings().parser

    def _validate_schema(
        self,
        amount: Optional[Decimal],
        currency_code: Optional[str],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="No amount was found in the command",
                severity="error",
                suggested_fix="Say the amount, e.g. 'I spent 25 dollars on lunch'",
            ))

        if not currency_code:
            issues.append(ValidationIssue(
                field="currency_code",
                issue_type="missing",
                message="No currency was mentioned and no default is set",
                severity="error",
                suggested_fix="Mention the currency, e.g. '50 dirhams' or '$20'",
            ))
        elif currency_code not in self._registry:
            issues.append(ValidationIssue(
                field="currency_code",
                issue_type="unknown_currency",
                message=f"Currency '{currency_code}' is not supported",
                severity="error",
                suggested_fix="Use one of the supported currencies",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        amount: Decimal,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Say an amount of at least one cent",
            ))
        elif amount > self._settings.max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message=f"Amount {amount} exceeds the maximum of {self._settings.max_amount}",
                severity="error",
                suggested_fix="Check the amount and try again",
            ))
        elif amount < self._settings.small_amount_warning:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount {amount} is unusually small",
                severity="warning",
                suggested_fix="Confirm the amount is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        amount: Optional[Decimal],
        currency_code: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []
        warnings = []

        # Stage 1: Schema validation
        schema_valid, schema_issues = self._validate_schema(amount, currency_code)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(amount)
            all_issues.extend(semantic_issues)

        for issue in all_issues:
            if issue.severity == "warning":
                warnings.append(issue.message)

        return ValidationResult(
            correlation_id=correlation_id,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        Short enough to be read back by a voice assistant.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("The expense could not be recorded:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"- {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"  {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"- {warning}")

        return "\n".join(lines)
