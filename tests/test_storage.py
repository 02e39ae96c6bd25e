"""
Tests for the record stores.

The Google Sheets store runs against an in-process fake of the gspread
worksheet API, so no network or credentials are needed.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from voicebudget.models.audit import AuditEventBuilder, AuditEventType
from voicebudget.models.records import (
    EntityKind,
    NamedEntity,
    TransactionKind,
    TransactionRecord,
)
from voicebudget.services.storage import (
    DEFAULT_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    GoogleSheetsAuditStorage,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotFoundError,
    StorageError,
    default_entities,
)
from voicebudget.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    ENTITY_COLUMNS,
    EXPENSE_COLUMNS,
    INCOME_COLUMNS,
)

from tests.conftest import USER_ID


class FakeWorksheet:
    """Minimal stand-in for gspread.Worksheet."""

    def __init__(self, header: list[str], fail_appends: bool = False):
        self.rows = [list(header)]
        self.fail_appends = fail_appends

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        if self.fail_appends:
            raise RuntimeError("APIError: quota exceeded")
        self.rows.append([str(v) for v in values])


class FakeSheetsClient:
    """Hands out one FakeWorksheet per table, like GoogleSheetsClient."""

    def __init__(self):
        self.sheets = {
            EntityKind.SOURCE: FakeWorksheet(ENTITY_COLUMNS),
            EntityKind.CATEGORY: FakeWorksheet(ENTITY_COLUMNS),
            TransactionKind.INCOME: FakeWorksheet(INCOME_COLUMNS),
            TransactionKind.EXPENSE: FakeWorksheet(EXPENSE_COLUMNS),
            "audit": FakeWorksheet(AUDIT_COLUMNS),
        }

    def get_entity_sheet(self, kind):
        return self.sheets[kind]

    def get_transaction_sheet(self, kind):
        return self.sheets[kind]

    def get_audit_sheet(self):
        return self.sheets["audit"]


class TestDefaults:
    """Tests for the shipped default entities."""

    def test_default_entities(self):
        entities = default_entities()
        sources = [e.display_name for e in entities if e.kind == EntityKind.SOURCE]
        categories = [e.display_name for e in entities if e.kind == EntityKind.CATEGORY]

        assert sources == DEFAULT_INCOME_SOURCES
        assert categories == DEFAULT_CATEGORIES
        assert all(e.is_global and not e.is_custom for e in entities)


class TestInMemoryRecordStore:
    """Tests for the dictionary-backed store."""

    @pytest.mark.asyncio
    async def test_find_is_case_insensitive_and_exact(self, store):
        groceries = await store.find_entity(EntityKind.CATEGORY, USER_ID, "GROCERIES")
        assert groceries is not None
        assert await store.find_entity(EntityKind.CATEGORY, USER_ID, "grocer") is None

    @pytest.mark.asyncio
    async def test_find_respects_kind(self, store):
        """'Salary' is a source, not a category."""
        assert await store.find_entity(EntityKind.CATEGORY, USER_ID, "salary") is None

    @pytest.mark.asyncio
    async def test_custom_entities_visible_to_owner_only(self, store):
        entity_id = await store.create_entity(EntityKind.CATEGORY, USER_ID, "Pets")

        assert await store.find_entity(EntityKind.CATEGORY, USER_ID, "pets") == entity_id
        assert await store.find_entity(EntityKind.CATEGORY, "user-2", "pets") is None

    @pytest.mark.asyncio
    async def test_list_entities_order(self, store):
        """Defaults first by name, then custom entities by name."""
        await store.create_entity(EntityKind.SOURCE, USER_ID, "tutoring")
        await store.create_entity(EntityKind.SOURCE, USER_ID, "Allowance")

        names = [e.display_name for e in await store.list_entities(EntityKind.SOURCE, USER_ID)]

        assert names == sorted(DEFAULT_INCOME_SOURCES, key=str.casefold) + ["Allowance", "tutoring"]

    def test_empty_store(self):
        assert InMemoryRecordStore(entities=[]).entities == []

    @pytest.mark.asyncio
    async def test_insert_requires_matching_entity(self, store):
        salary = await store.find_entity(EntityKind.SOURCE, USER_ID, "salary")

        with pytest.raises(NotFoundError):
            await store.insert_transaction(
                TransactionKind.EXPENSE, USER_ID, salary, Decimal("1.00"), date(2024, 3, 1)
            )
        with pytest.raises(NotFoundError):
            await store.insert_transaction(
                TransactionKind.INCOME, USER_ID, "missing", Decimal("1.00"), date(2024, 3, 1)
            )

    @pytest.mark.asyncio
    async def test_sum_is_inclusive_and_per_user(self, store):
        food = await store.find_entity(EntityKind.CATEGORY, USER_ID, "food")
        for day, amount, user in [
            (date(2024, 3, 1), "10.00", USER_ID),
            (date(2024, 3, 31), "5.25", USER_ID),
            (date(2024, 4, 1), "100.00", USER_ID),
            (date(2024, 3, 10), "7.00", "user-2"),
        ]:
            await store.insert_transaction(
                TransactionKind.EXPENSE, user, food, Decimal(amount), day
            )

        total = await store.sum_amounts(
            TransactionKind.EXPENSE, USER_ID, date(2024, 3, 1), date(2024, 3, 31)
        )

        assert total == Decimal("15.25")

    @pytest.mark.asyncio
    async def test_sum_empty_is_zero(self, store):
        total = await store.sum_amounts(
            TransactionKind.INCOME, USER_ID, date(2024, 3, 1), date(2024, 3, 31)
        )
        assert total == Decimal("0")

    @pytest.mark.asyncio
    async def test_list_transactions_newest_first(self, store):
        food = await store.find_entity(EntityKind.CATEGORY, USER_ID, "food")
        for minute, day in [(1, 1), (3, 20), (2, 10)]:
            store.add_transaction(TransactionRecord(
                kind=TransactionKind.EXPENSE,
                owner_user_id=USER_ID,
                entity_id=food,
                amount=Decimal(minute),
                entry_date=date(2024, 3, day),
                created_at=datetime(2024, 3, day, 12, minute),
            ))

        records = await store.list_transactions(TransactionKind.EXPENSE, USER_ID)
        assert [r.amount for r in records] == [Decimal(3), Decimal(2), Decimal(1)]

        limited = await store.list_transactions(TransactionKind.EXPENSE, USER_ID, limit=1)
        assert [r.amount for r in limited] == [Decimal(3)]

        filtered = await store.list_transactions(
            TransactionKind.EXPENSE, USER_ID, date_from=date(2024, 3, 5), date_to=date(2024, 3, 15)
        )
        assert [r.amount for r in filtered] == [Decimal(2)]


class TestGoogleSheetsRecordStore:
    """Tests for the worksheet-backed store."""

    def _store(self) -> tuple[GoogleSheetsRecordStore, FakeSheetsClient]:
        client = FakeSheetsClient()
        return GoogleSheetsRecordStore(client), client

    @pytest.mark.asyncio
    async def test_create_then_find(self):
        store, client = self._store()

        entity_id = await store.create_entity(EntityKind.CATEGORY, USER_ID, "Pets")

        row = client.sheets[EntityKind.CATEGORY].rows[1]
        assert row[:4] == [entity_id, USER_ID, "Pets", "True"]
        assert await store.find_entity(EntityKind.CATEGORY, USER_ID, "PETS") == entity_id
        assert await store.find_entity(EntityKind.CATEGORY, "user-2", "pets") is None

    @pytest.mark.asyncio
    async def test_seed_defaults_is_idempotent(self):
        store, client = self._store()

        written = store.seed_defaults(default_entities())
        again = store.seed_defaults(default_entities())

        assert written == len(DEFAULT_INCOME_SOURCES) + len(DEFAULT_CATEGORIES)
        assert again == 0
        assert await store.find_entity(EntityKind.SOURCE, "anyone", "salary") is not None

    @pytest.mark.asyncio
    async def test_defaults_listed_before_custom(self):
        store, _ = self._store()
        store.seed_defaults([NamedEntity(kind=EntityKind.CATEGORY, display_name="Food")])
        await store.create_entity(EntityKind.CATEGORY, USER_ID, "Coffee")

        names = [e.display_name for e in await store.list_entities(EntityKind.CATEGORY, USER_ID)]

        assert names == ["Food", "Coffee"]

    @pytest.mark.asyncio
    async def test_insert_sum_and_list(self):
        store, client = self._store()
        salary = await store.create_entity(EntityKind.SOURCE, USER_ID, "Salary")

        first = await store.insert_transaction(
            TransactionKind.INCOME, USER_ID, salary, Decimal("2500.00"), date(2024, 3, 1)
        )
        await store.insert_transaction(
            TransactionKind.INCOME, USER_ID, salary, Decimal("0.10"), date(2024, 4, 1)
        )

        assert client.sheets[TransactionKind.INCOME].rows[1][3] == "2500.00"

        total = await store.sum_amounts(
            TransactionKind.INCOME, USER_ID, date(2024, 3, 1), date(2024, 3, 31)
        )
        assert total == Decimal("2500.00")

        march = await store.list_transactions(
            TransactionKind.INCOME, USER_ID, date_to=date(2024, 3, 31)
        )
        assert [r.id for r in march] == [first]
        assert march[0].entry_date == date(2024, 3, 1)

    @pytest.mark.asyncio
    async def test_malformed_rows_skipped(self):
        store, client = self._store()
        client.sheets[TransactionKind.EXPENSE].rows.append(
            ["bad-row", USER_ID, "cat", "not-a-number", "2024-03-01", "2024-03-01T00:00:00"]
        )

        total = await store.sum_amounts(
            TransactionKind.EXPENSE, USER_ID, date(2024, 3, 1), date(2024, 3, 31)
        )

        assert total == Decimal("0")

    @pytest.mark.asyncio
    async def test_failed_append_raises_storage_error(self):
        store, client = self._store()
        client.sheets[TransactionKind.EXPENSE].fail_appends = True

        with pytest.raises(StorageError):
            await store.insert_transaction(
                TransactionKind.EXPENSE, USER_ID, "cat", Decimal("1.00"), date(2024, 3, 1)
            )


class TestGoogleSheetsAuditStorage:
    """Tests for the audit worksheet."""

    @pytest.mark.asyncio
    async def test_append_and_read_back(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsAuditStorage(client)
        event = AuditEventBuilder.command_failed(
            user_id=USER_ID,
            command_type="expense",
            error_message="boom",
        )

        assert await storage.append_event(event) is True

        [loaded] = await storage.get_recent_events()
        assert loaded.event_id == event.event_id
        assert loaded.event_type == AuditEventType.COMMAND_FAILED
        assert loaded.user_id == USER_ID
        assert loaded.error_message == "boom"
        assert loaded.details == {"command_type": "expense"}

    @pytest.mark.asyncio
    async def test_append_failure_returns_false(self):
        client = FakeSheetsClient()
        client.sheets["audit"].fail_appends = True
        storage = GoogleSheetsAuditStorage(client)

        event = AuditEventBuilder.command_unrecognized(user_id=USER_ID, text="hi")

        assert await storage.append_event(event) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
