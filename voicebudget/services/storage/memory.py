"""
In-Memory Storage Implementation

Keeps entities, transactions and audit events in process memory.
Used by the test suite and by the app when no Google Sheets
spreadsheet is configured. Data is lost when the process exits.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from voicebudget.models.audit import AuditEvent
from voicebudget.models.records import (
    EntityKind,
    NamedEntity,
    TransactionKind,
    TransactionRecord,
)
from voicebudget.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    RecordStoreInterface,
)


DEFAULT_INCOME_SOURCES = [
    "Salary",
    "Freelance",
    "Business",
    "Investments",
    "Gifts",
    "Other",
]

DEFAULT_CATEGORIES = [
    "Food",
    "Groceries",
    "Transportation",
    "Housing",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Shopping",
    "Education",
    "Other",
]


def default_entities() -> list[NamedEntity]:
    """Global default sources and categories shared by all users."""
    entities = [
        NamedEntity(kind=EntityKind.SOURCE, display_name=name)
        for name in DEFAULT_INCOME_SOURCES
    ]
    entities.extend(
        NamedEntity(kind=EntityKind.CATEGORY, display_name=name)
        for name in DEFAULT_CATEGORIES
    )
    return entities


class InMemoryRecordStore(RecordStoreInterface):
    """
    Dictionary-backed record store.

    Args:
        entities: Initial entities. Defaults to the global defaults;
                  pass an empty list to start with nothing.
    """

    def __init__(self, entities: Optional[Iterable[NamedEntity]] = None):
        self._entities: dict[str, NamedEntity] = {}
        self._transactions: list[TransactionRecord] = []

        for entity in default_entities() if entities is None else entities:
            self._entities[entity.id] = entity

    def add_entity(self, entity: NamedEntity) -> NamedEntity:
        """Insert a prepared entity (e.g. an extra global default)."""
        self._entities[entity.id] = entity
        return entity

    def add_transaction(self, record: TransactionRecord) -> TransactionRecord:
        """Insert a prepared record, e.g. one dated in another month."""
        self._transactions.append(record)
        return record

    @property
    def entities(self) -> list[NamedEntity]:
        return list(self._entities.values())

    @property
    def transactions(self) -> list[TransactionRecord]:
        return list(self._transactions)

    def _visible(self, kind: EntityKind, user_id: str) -> list[NamedEntity]:
        visible = [
            entity for entity in self._entities.values()
            if entity.kind == kind and entity.is_visible_to(user_id)
        ]
        visible.sort(key=lambda e: e.sort_key())
        return visible

    async def find_entity(
        self,
        kind: EntityKind,
        user_id: str,
        name: str,
    ) -> Optional[str]:
        for entity in self._visible(kind, user_id):
            if entity.matches(name):
                return entity.id
        return None

    async def create_entity(
        self,
        kind: EntityKind,
        user_id: str,
        display_name: str,
    ) -> str:
        entity = NamedEntity(
            kind=kind,
            owner_user_id=user_id,
            display_name=display_name,
            is_custom=True,
        )
        self._entities[entity.id] = entity
        return entity.id

    async def insert_transaction(
        self,
        kind: TransactionKind,
        user_id: str,
        entity_id: str,
        amount: Decimal,
        entry_date: date,
    ) -> str:
        entity = self._entities.get(entity_id)
        if entity is None or entity.kind != kind.entity_kind:
            raise NotFoundError(f"{kind.entity_kind.value} not found: {entity_id}")

        record = TransactionRecord(
            kind=kind,
            owner_user_id=user_id,
            entity_id=entity_id,
            amount=amount,
            entry_date=entry_date,
        )
        self._transactions.append(record)
        return record.id

    async def sum_amounts(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        return sum(
            (
                record.amount for record in self._transactions
                if record.kind == kind
                and record.owner_user_id == user_id
                and date_from <= record.entry_date <= date_to
            ),
            Decimal("0"),
        )

    async def list_entities(
        self,
        kind: EntityKind,
        user_id: str,
    ) -> list[NamedEntity]:
        return self._visible(kind, user_id)

    async def list_transactions(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100,
    ) -> list[TransactionRecord]:
        records = []
        for record in self._transactions:
            if record.kind != kind or record.owner_user_id != user_id:
                continue
            if date_from and record.entry_date < date_from:
                continue
            if date_to and record.entry_date > date_to:
                continue
            records.append(record)

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
