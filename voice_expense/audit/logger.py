"""
Audit Logger

DESIGN DECISION: Every step of a parse is logged.
This provides:
1. Complete traceability from transcript to command
2. Debugging capability for phrases that don't parse
3. A record of which currency source won

The audit logger:
- Is synchronous, the engine has no I/O to overlap with
- Logs locally only, persistence belongs to the host application
- Supports correlation IDs to trace the events of one transcript
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from voice_expense.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes every AuditEvent to the structured local log at the
    severity of the event.
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize audit logger.

        Args:
            enabled: When False, events are built but not written.
        """
        self._enabled = enabled
        self._logger = structlog.get_logger("voice_expense.audit")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        if not self._enabled:
            return False

        log_dict = event.to_log_dict()
        severity = event.severity.value

        if severity in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        return True

    def log_transcript_received(
        self,
        transcript: str,
        correlation_id: UUID,
        locale: Optional[str] = None,
    ) -> None:
        """Log the raw transcript."""
        event = AuditEventBuilder.transcript_received(
            transcript=transcript,
            correlation_id=correlation_id,
            locale=locale,
        )
        self.log(event)

    def log_amount_extracted(
        self,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        """Log the extracted amount."""
        event = AuditEventBuilder.amount_extracted(
            amount=amount,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_currency_resolved(
        self,
        currency_code: str,
        source: str,
        correlation_id: UUID,
        matched_text: Optional[str] = None,
    ) -> None:
        """Log which currency won and where it came from."""
        event = AuditEventBuilder.currency_resolved(
            currency_code=currency_code,
            source=source,
            correlation_id=correlation_id,
            matched_text=matched_text,
        )
        self.log(event)

    def log_category_classified(
        self,
        category: str,
        correlation_id: UUID,
    ) -> None:
        """Log the chosen category."""
        event = AuditEventBuilder.category_classified(
            category=category,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_validation_failed(
        self,
        stage: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        event = AuditEventBuilder.validation_failed(
            stage=stage,
            issues=issues,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_parse_succeeded(
        self,
        command: dict,
        correlation_id: UUID,
    ) -> None:
        """Log a finished command."""
        event = AuditEventBuilder.command_parsed(
            command=command,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_parse_failed(
        self,
        kind: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a typed parse failure."""
        event = AuditEventBuilder.parse_failed(
            kind=kind,
            message=message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_registry_loaded(
        self,
        source: str,
        currency_count: int,
        version: Optional[str] = None,
    ) -> None:
        """Log currency table load."""
        event = AuditEventBuilder.registry_loaded(
            source=source,
            currency_count=currency_count,
            version=version,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each transcript.
    Pass it through all subsequent operations.
    """
    return uuid4()
