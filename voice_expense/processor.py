"""
Voice Command Processor

This module ties together all the components and defines the
end-to-end flow:

    transcript -> amount + currency -> validate -> category + details -> command

DESIGN DECISION: The processor enforces the boundaries:
- A transcript becomes a full command or a typed error, never half of one
- No currency is ever guessed: detected, default, locale, or error
- Every step is audited

Parse failures are values, not exceptions. The host re-prompts the user
using the error's suggested_fix.
"""

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from voice_expense.audit import AuditLogger, create_correlation_id
from voice_expense.config import ParserSettings, Settings, get_settings
from voice_expense.models.expense import (
    CurrencyResolution,
    ExpenseCommand,
    ParseErrorKind,
    ParseResult,
    ValidationResult,
)
from voice_expense.parsing.category import CategoryClassifier
from voice_expense.parsing.currency import CurrencyDetector
from voice_expense.parsing.details import DetailExtractor
from voice_expense.parsing.extractor import AmountCurrencyExtractor
from voice_expense.parsing.numbers import NumberPhraseParser
from voice_expense.registry.currency_registry import (
    CurrencyRegistry,
    load_currency_registry,
)
from voice_expense.validation import ExpenseValidator


CENTS = Decimal("0.01")

ACTION_WORDS_RE = re.compile(
    r"\b(?:spent|spend|paid|pay|cost|bought|purchased?|buy)\b",
    re.IGNORECASE,
)
MERCHANT_HINT_RE = re.compile(r"\b(?:at|from|to)\b", re.IGNORECASE)

# Currency names that read the same in the plural
INVARIANT_PLURALS = frozenset({
    "yen", "yuan", "renminbi", "won", "baht", "rand", "dong",
    "ringgit", "rupiah", "leu", "lei", "real brasileiro",
})

SUGGESTED_PHRASE_TEMPLATES = (
    "I just spent 25 {currency} on food",
    "I paid 50 {currency} for groceries at the supermarket",
    "Log 15 {currency} for lunch",
    "I spent 30 {currency} on gas",
    "I bought coffee for 5 {currency}",
    "Add 100 {currency} shopping expense",
    "I just paid 20 {currency} for entertainment",
)

_LOCALE_REGION_RE = re.compile(r"^[A-Za-z]{2,3}[-_](?:[A-Za-z]{4}[-_])?([A-Za-z]{2}|\d{3})(?![A-Za-z0-9])")


def region_from_locale(locale: Optional[str]) -> Optional[str]:
    """
    Territory of a locale identifier.

    "en_AE" -> "AE", "ar-SA" -> "SA", "zh_Hant_HK" -> "HK", "en" -> None
    """
    if not locale:
        return None
    found = _LOCALE_REGION_RE.match(locale.strip())
    return found.group(1).upper() if found else None


def _plural(name: str) -> str:
    if name in INVARIANT_PLURALS or name.endswith("s"):
        return name
    return name + "s"


class VoiceCommandProcessor:
    """
    Orchestrates parsing of one transcript.

    Flow:
    1. Reject empty input
    2. Extract amount and currency
    3. Resolve currency: detected -> default -> locale
    4. Two-stage validation
    5. Category, merchant, notes, date, confidence
    6. Emit command (or typed error)
    """

    def __init__(
        self,
        registry: CurrencyRegistry,
        settings: Optional[ParserSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        detector: Optional[CurrencyDetector] = None,
        number_parser: Optional[NumberPhraseParser] = None,
        classifier: Optional[CategoryClassifier] = None,
        validator: Optional[ExpenseValidator] = None,
        details: Optional[DetailExtractor] = None,
    ):
        self._registry = registry
        self._settings = settings or get_settings().parser
        self._audit_logger = audit_logger
        self._detector = detector or CurrencyDetector(registry)
        self._numbers = number_parser or NumberPhraseParser()
        self._classifier = classifier or CategoryClassifier()
        self._validator = validator or ExpenseValidator(registry, self._settings)
        self._details = details or DetailExtractor(
            classifier=self._classifier,
            merchant_max_length=self._settings.merchant_max_length,
            notes_max_length=self._settings.notes_max_length,
        )
        self._extractor = AmountCurrencyExtractor(self._detector, self._numbers)

    @property
    def registry(self) -> CurrencyRegistry:
        return self._registry

    @property
    def extractor(self) -> AmountCurrencyExtractor:
        return self._extractor

    def process_voice_command(
        self,
        command: Optional[str],
        locale: Optional[str] = None,
        default_currency: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> ParseResult:
        """
        Parse a transcript into an ExpenseCommand.

        Args:
            command: Transcript from the speech recognizer.
            locale: Device locale, used only when no currency is spoken
                    and no default is given.
            default_currency: Currency used when none is spoken.
            correlation_id: Ties the audit events of this call together.
            today: Reference day for "yesterday" and friends.

        Returns:
            ParseResult with either a command or a typed error.
        """
        correlation_id = correlation_id or create_correlation_id()

        if command is None or not command.strip():
            return self._fail(
                ParseErrorKind.EMPTY_INPUT,
                "The command was empty",
                "Try saying something like 'I spent 20 dollars on lunch'",
                command,
                correlation_id,
            )

        if self._audit_logger:
            self._audit_logger.log_transcript_received(
                transcript=command,
                correlation_id=correlation_id,
                locale=locale,
            )

        # Step 1: Amount + detected currency
        extraction = self._extractor.extract(command)

        if extraction.amount is None:
            if extraction.ambiguous:
                return self._fail(
                    ParseErrorKind.AMBIGUOUS_NUMBER_PHRASE,
                    "The amount could not be understood",
                    "Say the amount as one number, e.g. 'two thousand five hundred'",
                    command,
                    correlation_id,
                )
            return self._fail(
                ParseErrorKind.MISSING_AMOUNT,
                "No amount was found in the command",
                "Include the amount, e.g. 'I spent 50 dirhams on groceries'",
                command,
                correlation_id,
            )

        try:
            amount = extraction.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return self._fail(
                ParseErrorKind.AMOUNT_OUT_OF_RANGE,
                f"Amount {extraction.amount} is too large",
                "Check the amount and try again",
                command,
                correlation_id,
            )

        if self._audit_logger:
            self._audit_logger.log_amount_extracted(
                amount=str(amount),
                correlation_id=correlation_id,
            )

        # Step 2: Currency
        currency_code, resolution = self._resolve_currency(
            extraction.currency_code,
            extraction.currency_match,
            default_currency,
            locale,
        )
        if currency_code is None:
            if default_currency:
                message = f"Default currency '{default_currency}' is not supported"
            else:
                message = "No currency was mentioned and none could be inferred"
            return self._fail(
                ParseErrorKind.UNRESOLVED_CURRENCY,
                message,
                "Mention the currency, e.g. '50 dirhams' or '$20'",
                command,
                correlation_id,
            )

        if self._audit_logger:
            self._audit_logger.log_currency_resolved(
                currency_code=currency_code,
                source=resolution.value,
                correlation_id=correlation_id,
                matched_text=extraction.matched_text,
            )

        # Step 3: Validation
        validation = self._validator.validate(amount, currency_code, correlation_id)
        if not validation.is_valid:
            return self._fail_validation(validation, command, correlation_id)

        # Step 4: Category and details
        category = self._classifier.classify(command)
        if self._audit_logger:
            self._audit_logger.log_category_classified(
                category=category.value,
                correlation_id=correlation_id,
            )

        expense = ExpenseCommand(
            amount=amount,
            currency_code=currency_code,
            category=category,
            merchant=self._details.extract_merchant(command),
            notes=self._details.extract_notes(command),
            raw_transcript=command,
            transaction_date=self._details.extract_transaction_date(command, today),
            confidence=self.get_confidence_score(command),
            currency_match=resolution,
        )

        if self._audit_logger:
            self._audit_logger.log_parse_succeeded(
                command=expense.to_log_dict(),
                correlation_id=correlation_id,
            )

        return ParseResult.success(expense)

    def _resolve_currency(
        self,
        detected_code: Optional[str],
        detected_match: Optional[str],
        default_currency: Optional[str],
        locale: Optional[str],
    ) -> tuple[Optional[str], Optional[CurrencyResolution]]:
        """detected -> default -> locale region; None when nothing applies."""
        if detected_code:
            return detected_code, CurrencyResolution(detected_match)

        if default_currency:
            code = default_currency.strip().upper()
            if code in self._registry:
                return code, CurrencyResolution.DEFAULT
            return None, None

        region = region_from_locale(locale)
        if region:
            code = self._registry.find_by_region(region)
            if code:
                return code, CurrencyResolution.LOCALE

        return None, None

    def _fail(
        self,
        kind: ParseErrorKind,
        message: str,
        suggested_fix: Optional[str],
        transcript: Optional[str],
        correlation_id: UUID,
    ) -> ParseResult:
        if self._audit_logger:
            self._audit_logger.log_parse_failed(
                kind=kind.value,
                message=message,
                correlation_id=correlation_id,
            )
        return ParseResult.failure(
            kind=kind,
            message=message,
            suggested_fix=suggested_fix,
            transcript=transcript,
        )

    def _fail_validation(
        self,
        validation: ValidationResult,
        transcript: str,
        correlation_id: UUID,
    ) -> ParseResult:
        stage = "schema" if not validation.schema_valid else "semantic"
        if self._audit_logger:
            self._audit_logger.log_validation_failed(
                stage=stage,
                issues=[issue.model_dump() for issue in validation.issues],
                correlation_id=correlation_id,
            )

        issue = validation.first_error()
        if issue is None or (issue.field == "amount" and issue.issue_type == "out_of_range"):
            kind = ParseErrorKind.AMOUNT_OUT_OF_RANGE
        elif issue.field == "amount":
            kind = ParseErrorKind.MISSING_AMOUNT
        else:
            kind = ParseErrorKind.UNRESOLVED_CURRENCY

        return self._fail(
            kind,
            issue.message if issue else "Validation failed",
            issue.suggested_fix if issue else None,
            transcript,
            correlation_id,
        )

    def get_confidence_score(self, command: Optional[str]) -> float:
        """
        How much the transcript looks like an expense command.

        amount 0.3, category 0.3, action word 0.2,
        merchant preposition 0.1, currency 0.1; capped at 1.0.
        """
        if not command or not command.strip():
            return 0.0

        score = 0.0
        if any(c.isdigit() for c in command) or self._numbers.contains_number_phrase(command):
            score += 0.3
        if self._classifier.has_category_keyword(command):
            score += 0.3
        if ACTION_WORDS_RE.search(command):
            score += 0.2
        if MERCHANT_HINT_RE.search(command):
            score += 0.1
        if self._detector.contains_currency(command):
            score += 0.1
        return round(min(score, 1.0), 2)

    def get_suggested_phrases(self, currency_code: Optional[str] = None) -> list[str]:
        """
        Example commands for voice training, in the given currency.

        Defaults to the highest-ranked currency of the registry.
        """
        code = (currency_code or self._registry.codes[0]).strip().upper()
        if code not in self._registry:
            raise KeyError(f"Unknown currency: {code}")

        name = _plural(self._registry.spoken_name(code))
        return [template.format(currency=name) for template in SUGGESTED_PHRASE_TEMPLATES]


def create_voice_pipeline(
    settings: Optional[Settings] = None,
) -> VoiceCommandProcessor:
    """
    Factory function to create a fully wired processor.

    Loads the currency table named in the settings (or the packaged one)
    and shares one registry and one audit logger across all components.
    """
    settings = settings or get_settings()
    parser_settings = settings.parser
    audit_logger = AuditLogger(enabled=settings.app.audit_enabled)

    registry = load_currency_registry(
        path=parser_settings.currencies_path,
        common_codes=parser_settings.common_currencies_list,
        audit_logger=audit_logger,
    )

    return VoiceCommandProcessor(
        registry=registry,
        settings=parser_settings,
        audit_logger=audit_logger,
    )
