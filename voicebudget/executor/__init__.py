"""Command execution package."""

from voicebudget.executor.cancellation import CancellationToken, CommandCancelled
from voicebudget.executor.command_executor import (
    CANCELLED_MESSAGE,
    FAILURE_MESSAGE,
    UNRECOGNIZED_MESSAGE,
    CommandExecutor,
    current_month_range,
    format_amount,
)

__all__ = [
    "CANCELLED_MESSAGE",
    "FAILURE_MESSAGE",
    "UNRECOGNIZED_MESSAGE",
    "CancellationToken",
    "CommandCancelled",
    "CommandExecutor",
    "current_month_range",
    "format_amount",
]
