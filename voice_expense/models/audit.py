"""
Audit Models for Voice Expense

Every step of a parse is logged for audit purposes.
This provides:
1. Traceability from transcript to command
2. Debugging information when a phrase doesn't parse
3. A record of which currency source won and why

DESIGN DECISION: Audit events are immutable records. Nothing downstream
edits an event after it is built.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step in the voice parsing pipeline has its own event type.
    """
    # Parsing
    TRANSCRIPT_RECEIVED = "transcript_received"
    AMOUNT_EXTRACTED = "amount_extracted"
    CURRENCY_RESOLVED = "currency_resolved"
    CATEGORY_CLASSIFIED = "category_classified"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Outcome
    COMMAND_PARSED = "command_parsed"
    PARSE_FAILED = "parse_failed"

    # System events
    REGISTRY_LOADED = "registry_loaded"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - all events of one transcript share an ID
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one parse"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


def _clip(text: str, limit: int = 120) -> str:
    return text if len(text) <= limit else text[:limit - 3] + "..."


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transcript_received(transcript, correlation_id)
        event = AuditEventBuilder.command_parsed(command_dict, correlation_id)
    """

    @staticmethod
    def transcript_received(
        transcript: str,
        correlation_id: UUID,
        locale: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSCRIPT_RECEIVED,
            correlation_id=correlation_id,
            description=f"Transcript received: {_clip(transcript)}",
            details={
                "transcript": transcript,
                "length": len(transcript),
                "locale": locale,
            },
        )

    @staticmethod
    def amount_extracted(
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_EXTRACTED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Amount extracted: {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def currency_resolved(
        currency_code: str,
        source: str,
        correlation_id: UUID,
        matched_text: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_RESOLVED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Currency resolved to {currency_code} from {source}",
            details={
                "currency_code": currency_code,
                "source": source,
                "matched_text": matched_text,
            },
        )

    @staticmethod
    def category_classified(
        category: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_CLASSIFIED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Category classified: {category}",
            details={"category": category},
        )

    @staticmethod
    def validation_failed(
        stage: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{stage.capitalize()} validation failed with {len(issues)} issues",
            details={
                "stage": stage,
                "issues": issues,
            },
        )

    @staticmethod
    def command_parsed(
        command: dict,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_PARSED,
            correlation_id=correlation_id,
            description=(
                f"Command parsed: {command.get('amount')} "
                f"{command.get('currency_code')} ({command.get('category')})"
            ),
            details=command,
        )

    @staticmethod
    def parse_failed(
        kind: str,
        message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Parse failed: {kind}",
            error_code=kind,
            error_message=message,
        )

    @staticmethod
    def registry_loaded(
        source: str,
        currency_count: int,
        version: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRY_LOADED,
            description=f"Currency registry loaded: {currency_count} currencies",
            details={
                "source": source,
                "currency_count": currency_count,
                "version": version,
            },
        )
