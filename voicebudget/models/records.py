"""
Record Store Models

These models describe what the executor reads from and writes to the
record store:

1. NamedEntity - an income source or an expense category
2. TransactionRecord - a single income or expense
3. BudgetSummary - monthly totals for the budget query

Entities without an owner are global defaults shared by every user.
Entities with an owner were created through the custom path
(e.g. a voice command naming a category the user never had).
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field


class EntityKind(str, Enum):
    """Kinds of named entity a transaction can reference."""
    SOURCE = "source"
    CATEGORY = "category"


class TransactionKind(str, Enum):
    """Kinds of transaction record."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def entity_kind(self) -> EntityKind:
        """The entity kind this transaction kind references."""
        if self is TransactionKind.INCOME:
            return EntityKind.SOURCE
        return EntityKind.CATEGORY


def _new_id() -> str:
    return str(uuid4())


class NamedEntity(BaseModel):
    """
    An income source or expense category.

    Matching against display names is case-insensitive; the stored
    display name keeps the case it was created with.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=_new_id,
        description="Unique entity id"
    )
    kind: EntityKind
    owner_user_id: Optional[str] = Field(
        default=None,
        description="Owning user; None for global defaults"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Name shown to the user"
    )
    is_custom: bool = Field(
        default=False,
        description="Created by a user rather than shipped as a default"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    @property
    def is_global(self) -> bool:
        return self.owner_user_id is None

    def is_visible_to(self, user_id: str) -> bool:
        """Global entities are visible to everyone, owned ones to their owner."""
        return self.owner_user_id is None or self.owner_user_id == user_id

    def matches(self, name: str) -> bool:
        """Exact case-insensitive comparison of display names."""
        return self.display_name.casefold() == name.strip().casefold()

    def sort_key(self) -> tuple:
        """
        Deterministic ordering within a visible set:
        defaults first, then by name, then by id.
        """
        return (self.is_custom, self.display_name.casefold(), self.id)


class TransactionRecord(BaseModel):
    """A single income or expense entry."""

    id: str = Field(
        default_factory=_new_id,
        description="Unique record id"
    )
    kind: TransactionKind
    owner_user_id: str = Field(
        ...,
        min_length=1
    )
    entity_id: str = Field(
        ...,
        min_length=1,
        description="Source id for incomes, category id for expenses"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Positive amount"
    )
    entry_date: date = Field(
        ...,
        description="Calendar day the transaction counts toward"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow
    )


class BudgetSummary(BaseModel):
    """Income, expenses and what is left for one period."""

    income: Decimal = Field(default=Decimal("0.00"))
    expenses: Decimal = Field(default=Decimal("0.00"))
    period_start: date
    period_end: date

    @computed_field
    @property
    def remaining(self) -> Decimal:
        return self.income - self.expenses
