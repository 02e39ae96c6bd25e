"""
Audit Models for Voice Budget

Every step of a voice command's life is recorded as an audit event:
transcription, parsing, entity resolution, the transaction write and
the final outcome. Events from one invocation share a correlation id.

Audit logs are append-only.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Speech
    TRANSCRIPTION_COMPLETED = "transcription_completed"
    TRANSCRIPTION_FALLBACK = "transcription_fallback"
    SPEECH_SYNTHESIS_FAILED = "speech_synthesis_failed"

    # Parsing
    COMMAND_PARSED = "command_parsed"
    COMMAND_UNRECOGNIZED = "command_unrecognized"

    # Execution
    ENTITY_RESOLVED = "entity_resolved"
    ENTITY_CREATED = "entity_created"
    TRANSACTION_RECORDED = "transaction_recorded"
    BUDGET_SUMMARY_GENERATED = "budget_summary_generated"
    COMMAND_FAILED = "command_failed"
    COMMAND_CANCELLED = "command_cancelled"

    # System events
    SYSTEM_ERROR = "system_error"


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
        default_factory=datetime.utcnow,
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

    # Who and what
    user_id: Optional[str] = Field(
        default=None,
        description="User the command was issued for"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'category', 'income', 'command')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one voice command"
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

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id, entity_type,
         entity_id, correlation_id, description, details_json, error_message,
         is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.command_parsed(user_id, "expense", text, correlation_id)
        event = AuditEventBuilder.transaction_recorded(...)
    """

    @staticmethod
    def command_parsed(
        user_id: str,
        command_type: str,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_PARSED,
            user_id=user_id,
            entity_type="command",
            correlation_id=correlation_id,
            description=f"Voice command parsed as {command_type}",
            details={
                "command_type": command_type,
                "text": text,
            },
            is_user_action=True,
        )

    @staticmethod
    def command_unrecognized(
        user_id: str,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # Unrecognized input is a normal outcome, not an error
        return AuditEvent(
            event_type=AuditEventType.COMMAND_UNRECOGNIZED,
            severity=AuditSeverity.INFO,
            user_id=user_id,
            entity_type="command",
            correlation_id=correlation_id,
            description="Voice command not recognized",
            details={"text": text},
            is_user_action=True,
        )

    @staticmethod
    def entity_resolved(
        user_id: str,
        entity_type: str,
        entity_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_RESOLVED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Resolved {entity_type} '{name}' to existing entry",
            details={"name": name},
        )

    @staticmethod
    def entity_created(
        user_id: str,
        entity_type: str,
        entity_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Created custom {entity_type}: {name}",
            details={"name": name},
        )

    @staticmethod
    def transaction_recorded(
        user_id: str,
        transaction_type: str,
        transaction_id: str,
        entity_name: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            user_id=user_id,
            entity_type=transaction_type,
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{transaction_type.capitalize()} recorded: {entity_name} - {amount}",
            details={
                "name": entity_name,
                "amount": amount,
            },
        )

    @staticmethod
    def budget_summary_generated(
        user_id: str,
        income: str,
        expenses: str,
        remaining: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SUMMARY_GENERATED,
            user_id=user_id,
            entity_type="summary",
            correlation_id=correlation_id,
            description="Monthly budget summary generated",
            details={
                "income": income,
                "expenses": expenses,
                "remaining": remaining,
            },
        )

    @staticmethod
    def command_failed(
        user_id: str,
        command_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="command",
            correlation_id=correlation_id,
            description=f"Failed to execute {command_type} command",
            error_message=error_message,
            details={"command_type": command_type},
        )

    @staticmethod
    def command_cancelled(
        user_id: str,
        command_type: str,
        stage: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_CANCELLED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="command",
            correlation_id=correlation_id,
            description=f"{command_type} command cancelled before {stage}",
            details={
                "command_type": command_type,
                "stage": stage,
            },
        )

    @staticmethod
    def transcription_completed(
        user_id: str,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSCRIPTION_COMPLETED,
            user_id=user_id,
            entity_type="audio",
            correlation_id=correlation_id,
            description="Recording transcribed",
            details={"text": text},
            is_user_action=True,
        )

    @staticmethod
    def transcription_fallback(
        user_id: str,
        error_message: str,
        fallback_text: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSCRIPTION_FALLBACK,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="audio",
            correlation_id=correlation_id,
            description="Speech-to-text failed, using simulated transcript",
            error_message=error_message,
            details={"fallback_text": fallback_text},
        )

    @staticmethod
    def speech_synthesis_failed(
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPEECH_SYNTHESIS_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="audio",
            correlation_id=correlation_id,
            description="Spoken confirmation could not be generated",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
