"""
Data Models Package

This package contains all Pydantic models used in Voice Budget.
All data flowing through the pipeline must conform to these schemas.
"""

from voicebudget.models.command import (
    AddExpense,
    AddIncome,
    Command,
    CommandType,
    ShowBudgetSummary,
    Unrecognized,
    command_from_payload,
    command_to_payload,
)
from voicebudget.models.records import (
    BudgetSummary,
    EntityKind,
    NamedEntity,
    TransactionKind,
    TransactionRecord,
)
from voicebudget.models.result import ExecutionResult, VoiceResponse
from voicebudget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Commands
    "AddExpense",
    "AddIncome",
    "Command",
    "CommandType",
    "ShowBudgetSummary",
    "Unrecognized",
    "command_from_payload",
    "command_to_payload",
    # Records
    "BudgetSummary",
    "EntityKind",
    "NamedEntity",
    "TransactionKind",
    "TransactionRecord",
    # Results
    "ExecutionResult",
    "VoiceResponse",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
