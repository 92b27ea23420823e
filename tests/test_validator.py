"""
Tests for the two-stage expense validator
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from voice_expense.config import ParserSettings
from voice_expense.validation import ExpenseValidator


@pytest.fixture
def validator(registry, parser_settings):
    return ExpenseValidator(registry, parser_settings)


class TestSchemaValidation:
    """Stage 1: presence and known currency."""

    def test_valid(self, validator):
        result = validator.validate(Decimal("50"), "AED")
        assert result.is_valid is True
        assert result.schema_valid is True
        assert result.semantic_valid is True
        assert result.issues == []

    def test_missing_amount(self, validator):
        """Test that a missing amount fails stage 1."""
        result = validator.validate(None, "AED")
        assert result.is_valid is False
        assert result.schema_valid is False
        assert result.semantic_valid is False
        issue = result.first_error()
        assert issue.field == "amount"
        assert issue.issue_type == "missing"

    def test_missing_currency(self, validator):
        result = validator.validate(Decimal("5"), None)
        assert result.first_error().field == "currency_code"
        assert result.first_error().issue_type == "missing"

    def test_unknown_currency(self, validator):
        result = validator.validate(Decimal("5"), "XYZ")
        assert result.is_valid is False
        assert result.first_error().issue_type == "unknown_currency"

    def test_both_missing(self, validator):
        """Test that all stage 1 issues are reported together."""
        result = validator.validate(None, None)
        assert result.error_count == 2

    def test_correlation_id_kept(self, validator):
        correlation_id = uuid4()
        result = validator.validate(Decimal("5"), "USD", correlation_id)
        assert result.correlation_id == correlation_id


class TestSemanticValidation:
    """Stage 2: amount ranges."""

    def test_zero_amount(self, validator):
        result = validator.validate(Decimal("0"), "USD")
        assert result.is_valid is False
        assert result.schema_valid is True
        assert result.semantic_valid is False
        assert result.first_error().issue_type == "out_of_range"

    def test_amount_over_maximum(self, validator):
        result = validator.validate(Decimal("1000000000000"), "USD")
        assert result.first_error().issue_type == "out_of_range"

    def test_maximum_is_allowed(self, validator):
        assert validator.validate(Decimal("999999999999.99"), "USD").is_valid is True

    def test_small_amount_is_a_warning(self, validator):
        """Test that tiny amounts pass with a warning."""
        result = validator.validate(Decimal("0.50"), "USD")
        assert result.is_valid is True
        assert result.has_errors is False
        assert len(result.warnings) == 1
        assert result.issues[0].issue_type == "suspicious_value"

    def test_custom_maximum(self, registry):
        """Test that the configured maximum is used."""
        validator = ExpenseValidator(registry, ParserSettings(max_amount=Decimal("100")))
        assert validator.validate(Decimal("100.01"), "USD").is_valid is False
        assert validator.validate(Decimal("100"), "USD").is_valid is True


class TestSummary:
    """Tests for get_user_friendly_summary()."""

    def test_all_passed(self, validator):
        result = validator.validate(Decimal("50"), "AED")
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors(self, validator):
        summary = validator.get_user_friendly_summary(validator.validate(None, "AED"))
        assert "could not be recorded" in summary
        assert "No amount" in summary

    def test_warnings(self, validator):
        summary = validator.get_user_friendly_summary(validator.validate(Decimal("0.10"), "AED"))
        assert "Please double-check" in summary
        assert "could not be recorded" not in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
