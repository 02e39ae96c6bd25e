"""
Voice Command Models

A transcript is classified into exactly one command variant:

- AddIncome         "add $2000 from salary to my income"
- AddExpense        "spend $25 on transportation"
- ShowBudgetSummary "show my budget"
- Unrecognized      anything else (carries the raw text)

Commands are immutable and are consumed once by the executor.
The `type` tag is the discriminator and doubles as the wire value,
so a command serializes to {"type", "amount", "source"/"category", "text"}.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_serializer,
)


class CommandType(str, Enum):
    """Wire tags for the command variants."""
    INCOME = "income"
    EXPENSE = "expense"
    SHOW_BUDGET = "show_budget"
    UNKNOWN = "unknown"


class _BaseCommand(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(
        default="",
        description="Transcript the command was parsed from"
    )


class AddIncome(_BaseCommand):
    """Record an income amount against a named source."""

    type: Literal["income"] = "income"
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount"
    )
    source_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("source_name", "source"),
        serialization_alias="source",
        description="Income source as spoken"
    )

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, value: Decimal) -> float:
        return float(value)


class AddExpense(_BaseCommand):
    """Record an expense amount against a named category."""

    type: Literal["expense"] = "expense"
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount"
    )
    category_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("category_name", "category"),
        serialization_alias="category",
        description="Expense category as spoken"
    )

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, value: Decimal) -> float:
        return float(value)


class ShowBudgetSummary(_BaseCommand):
    """Report this month's income, expenses and remaining budget."""

    type: Literal["show_budget"] = "show_budget"


class Unrecognized(_BaseCommand):
    """Transcript that matched no known command shape."""

    type: Literal["unknown"] = "unknown"


Command = Annotated[
    Union[AddIncome, AddExpense, ShowBudgetSummary, Unrecognized],
    Field(discriminator="type"),
]

command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def command_from_payload(data: dict) -> Command:
    """Build a command from its wire form (e.g. {"type": "income", ...})."""
    return command_adapter.validate_python(data)


def command_to_payload(command: Command) -> dict:
    """Serialize a command to its wire form."""
    return command.model_dump(mode="json", by_alias=True)
