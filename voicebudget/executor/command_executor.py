"""
Command Execution Engine

Execution is DETERMINISTIC: a parsed command is applied to the record
store and a confirmation message is built from what was actually written
or read.

- AddIncome / AddExpense: resolve the named source/category (reusing an
  existing one, matched case-insensitively, or creating a custom one for
  the user), then insert one record dated today.
- ShowBudgetSummary: total this month's income and expenses.
- Unrecognized: no store access at all.

Store failures never escape: the caller gets a generic retry message and
the detail goes to the log.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

import structlog

from voicebudget.audit import AuditLogger, create_correlation_id
from voicebudget.executor.cancellation import CancellationToken, CommandCancelled
from voicebudget.models.command import (
    AddExpense,
    AddIncome,
    Command,
    ShowBudgetSummary,
    Unrecognized,
)
from voicebudget.models.records import BudgetSummary, TransactionKind
from voicebudget.models.result import ExecutionResult
from voicebudget.services.storage import RecordStoreInterface


logger = structlog.get_logger(__name__)


CENT = Decimal("0.01")

UNRECOGNIZED_MESSAGE = (
    "I didn't understand that command. Try saying "
    "\"Spend $50 on groceries\" or \"Add $2000 from salary to my income\"."
)
FAILURE_MESSAGE = "Sorry, I couldn't process that command. Please try again."
CANCELLED_MESSAGE = "The command was cancelled."


def current_month_range(today: date) -> tuple[date, date]:
    """First and last day (inclusive) of the month containing `today`."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def format_amount(amount: Decimal, symbol: str = "$") -> str:
    """Money with exactly two decimals, e.g. $2000.00."""
    return f"{symbol}{amount.quantize(CENT):.2f}"


class CommandExecutor:
    """
    Applies parsed commands to a record store.

    Args:
        store: Record store backend
        audit_logger: Audit trail; a local-only logger is used when omitted
        today: Returns the current date (tests pin it)
        currency_symbol: Prefix for amounts in messages
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = date.today,
        currency_symbol: str = "$",
    ):
        self._store = store
        self._audit = audit_logger or AuditLogger()
        self._today = today
        self._symbol = currency_symbol

    async def execute(
        self,
        command: Command,
        user_id: str,
        cancel_token: Optional[CancellationToken] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ExecutionResult:
        """
        Execute one command for `user_id`.

        Never raises; failures and cancellation come back as results.
        """
        token = cancel_token or CancellationToken()
        correlation_id = correlation_id or create_correlation_id()

        if isinstance(command, Unrecognized):
            await self._audit.log_command_unrecognized(
                user_id=user_id,
                text=command.text,
                correlation_id=correlation_id,
            )
            return ExecutionResult(
                success=False,
                command=command,
                message=UNRECOGNIZED_MESSAGE,
            )

        await self._audit.log_command_parsed(
            user_id=user_id,
            command_type=command.type,
            text=command.text,
            correlation_id=correlation_id,
        )

        try:
            if isinstance(command, AddIncome):
                return await self._record_income(command, user_id, token, correlation_id)
            elif isinstance(command, AddExpense):
                return await self._record_expense(command, user_id, token, correlation_id)
            elif isinstance(command, ShowBudgetSummary):
                return await self._summarize(command, user_id, token, correlation_id)
            raise TypeError(f"Unsupported command: {type(command).__name__}")

        except CommandCancelled as e:
            logger.warning(
                "command_cancelled",
                command_type=command.type,
                stage=e.stage,
                user_id=user_id,
            )
            await self._audit.log_command_cancelled(
                user_id=user_id,
                command_type=command.type,
                stage=e.stage,
                correlation_id=correlation_id,
            )
            return ExecutionResult(
                success=False,
                cancelled=True,
                command=command,
                message=CANCELLED_MESSAGE,
            )

        except Exception as e:
            logger.exception(
                "command_failed",
                command_type=command.type,
                user_id=user_id,
                error=str(e),
            )
            await self._audit.log_command_failed(
                user_id=user_id,
                command_type=command.type,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return ExecutionResult(
                success=False,
                command=command,
                message=FAILURE_MESSAGE,
            )

    async def _resolve(
        self,
        kind: TransactionKind,
        user_id: str,
        name: str,
        token: CancellationToken,
        correlation_id: UUID,
    ) -> str:
        """Find the user's source/category by name, creating it if missing."""
        entity_kind = kind.entity_kind

        token.raise_if_cancelled(f"{entity_kind.value} lookup")
        entity_id = await self._store.find_entity(entity_kind, user_id, name)
        created = entity_id is None

        if created:
            token.raise_if_cancelled(f"{entity_kind.value} creation")
            entity_id = await self._store.create_entity(entity_kind, user_id, name)

        await self._audit.log_entity_resolved(
            user_id=user_id,
            entity_type=entity_kind.value,
            entity_id=entity_id,
            name=name,
            created=created,
            correlation_id=correlation_id,
        )
        return entity_id

    async def _insert(
        self,
        kind: TransactionKind,
        user_id: str,
        entity_id: str,
        name: str,
        amount: Decimal,
        token: CancellationToken,
        correlation_id: UUID,
    ) -> str:
        token.raise_if_cancelled(f"{kind.value} insert")
        transaction_id = await self._store.insert_transaction(
            kind,
            user_id,
            entity_id,
            amount.quantize(CENT),
            self._today(),
        )
        await self._audit.log_transaction_recorded(
            user_id=user_id,
            transaction_type=kind.value,
            transaction_id=transaction_id,
            entity_name=name,
            amount=format_amount(amount, self._symbol),
            correlation_id=correlation_id,
        )
        return transaction_id

    async def _record_income(
        self,
        command: AddIncome,
        user_id: str,
        token: CancellationToken,
        correlation_id: UUID,
    ) -> ExecutionResult:
        kind = TransactionKind.INCOME
        source = command.source_name

        entity_id = await self._resolve(kind, user_id, source, token, correlation_id)
        transaction_id = await self._insert(
            kind, user_id, entity_id, source, command.amount, token, correlation_id
        )

        amount = format_amount(command.amount, self._symbol)
        return ExecutionResult(
            success=True,
            command=command,
            message=f"Added {amount} from {source} to your income.",
            audio_response=f"Great! I've added {amount} from {source} to your income for today.",
            transaction_id=transaction_id,
            entity_id=entity_id,
        )

    async def _record_expense(
        self,
        command: AddExpense,
        user_id: str,
        token: CancellationToken,
        correlation_id: UUID,
    ) -> ExecutionResult:
        kind = TransactionKind.EXPENSE
        category = command.category_name

        entity_id = await self._resolve(kind, user_id, category, token, correlation_id)
        transaction_id = await self._insert(
            kind, user_id, entity_id, category, command.amount, token, correlation_id
        )

        amount = format_amount(command.amount, self._symbol)
        return ExecutionResult(
            success=True,
            command=command,
            message=f"Added {amount} expense for {category}.",
            audio_response=f"Perfect! I've recorded your {amount} expense for {category}.",
            transaction_id=transaction_id,
            entity_id=entity_id,
        )

    async def _summarize(
        self,
        command: ShowBudgetSummary,
        user_id: str,
        token: CancellationToken,
        correlation_id: UUID,
    ) -> ExecutionResult:
        period_start, period_end = current_month_range(self._today())

        token.raise_if_cancelled("income total")
        income = await self._store.sum_amounts(
            TransactionKind.INCOME, user_id, period_start, period_end
        )
        token.raise_if_cancelled("expense total")
        expenses = await self._store.sum_amounts(
            TransactionKind.EXPENSE, user_id, period_start, period_end
        )

        summary = BudgetSummary(
            income=income,
            expenses=expenses,
            period_start=period_start,
            period_end=period_end,
        )

        income_text = format_amount(summary.income, self._symbol)
        expenses_text = format_amount(summary.expenses, self._symbol)
        remaining_text = format_amount(summary.remaining, self._symbol)

        await self._audit.log_budget_summary(
            user_id=user_id,
            income=income_text,
            expenses=expenses_text,
            remaining=remaining_text,
            correlation_id=correlation_id,
        )

        return ExecutionResult(
            success=True,
            command=command,
            message=(
                f"Your budget summary: {income_text} income, "
                f"{expenses_text} expenses, {remaining_text} remaining."
            ),
            audio_response=(
                "Here's your budget summary for this month. "
                f"You have {income_text} in income, you've spent {expenses_text}, "
                f"leaving you with {remaining_text} remaining."
            ),
            summary=summary,
        )
