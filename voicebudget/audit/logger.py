"""
Audit Logger

Every voice command leaves a trail: what was heard, how it was parsed,
which source or category it resolved to, what was written and how it
ended. Events from one invocation share a correlation ID.

The audit logger:
- Is async so it fits the command flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from voicebudget.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from voicebudget.services.storage import AuditStorageInterface


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


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and so structlog) to stdout at `level`."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transcription_completed(
        self,
        user_id: str,
        text: str,
        correlation_id: UUID,
    ) -> None:
        """Log a successful speech-to-text call."""
        await self.log(AuditEventBuilder.transcription_completed(
            user_id=user_id,
            text=text,
            correlation_id=correlation_id,
        ))

    async def log_transcription_fallback(
        self,
        user_id: str,
        error_message: str,
        fallback_text: str,
        correlation_id: UUID,
    ) -> None:
        """Log a speech-to-text failure replaced by a simulated transcript."""
        await self.log(AuditEventBuilder.transcription_fallback(
            user_id=user_id,
            error_message=error_message,
            fallback_text=fallback_text,
            correlation_id=correlation_id,
        ))

    async def log_speech_synthesis_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.speech_synthesis_failed(
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_command_parsed(
        self,
        user_id: str,
        command_type: str,
        text: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_parsed(
            user_id=user_id,
            command_type=command_type,
            text=text,
            correlation_id=correlation_id,
        ))

    async def log_command_unrecognized(
        self,
        user_id: str,
        text: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_unrecognized(
            user_id=user_id,
            text=text,
            correlation_id=correlation_id,
        ))

    async def log_entity_resolved(
        self,
        user_id: str,
        entity_type: str,
        entity_id: str,
        name: str,
        created: bool,
        correlation_id: UUID,
    ) -> None:
        """Log the source/category a command resolved to."""
        builder = (
            AuditEventBuilder.entity_created
            if created
            else AuditEventBuilder.entity_resolved
        )
        await self.log(builder(
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_transaction_recorded(
        self,
        user_id: str,
        transaction_type: str,
        transaction_id: str,
        entity_name: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_recorded(
            user_id=user_id,
            transaction_type=transaction_type,
            transaction_id=transaction_id,
            entity_name=entity_name,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_budget_summary(
        self,
        user_id: str,
        income: str,
        expenses: str,
        remaining: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.budget_summary_generated(
            user_id=user_id,
            income=income,
            expenses=expenses,
            remaining=remaining,
            correlation_id=correlation_id,
        ))

    async def log_command_failed(
        self,
        user_id: str,
        command_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_failed(
            user_id=user_id,
            command_type=command_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_command_cancelled(
        self,
        user_id: str,
        command_type: str,
        stage: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_cancelled(
            user_id=user_id,
            command_type=command_type,
            stage=stage,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new voice command.
    Pass it through all subsequent operations.
    """
    return uuid4()
