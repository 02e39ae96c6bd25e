"""
Shared test fixtures.

No real API calls in tests: stores are in-memory, speech channels are
fakes, and "today" is pinned.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from voicebudget.audit import AuditLogger
from voicebudget.executor import CommandExecutor
from voicebudget.models.records import EntityKind, TransactionKind
from voicebudget.services.speech import SpeechChannel, SpeechError
from voicebudget.services.storage import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
    RecordStoreInterface,
    StorageError,
)


TODAY = date(2024, 3, 15)
USER_ID = "user-1"


class SpyRecordStore(RecordStoreInterface):
    """Records every call and delegates to an in-memory store."""

    def __init__(self, inner: Optional[InMemoryRecordStore] = None):
        self.inner = inner or InMemoryRecordStore()
        self.calls: list[str] = []

    async def find_entity(self, kind, user_id, name):
        self.calls.append("find_entity")
        return await self.inner.find_entity(kind, user_id, name)

    async def create_entity(self, kind, user_id, display_name):
        self.calls.append("create_entity")
        return await self.inner.create_entity(kind, user_id, display_name)

    async def insert_transaction(self, kind, user_id, entity_id, amount, entry_date):
        self.calls.append("insert_transaction")
        return await self.inner.insert_transaction(kind, user_id, entity_id, amount, entry_date)

    async def sum_amounts(self, kind, user_id, date_from, date_to):
        self.calls.append("sum_amounts")
        return await self.inner.sum_amounts(kind, user_id, date_from, date_to)

    async def list_entities(self, kind, user_id):
        self.calls.append("list_entities")
        return await self.inner.list_entities(kind, user_id)

    async def list_transactions(self, kind, user_id, date_from=None, date_to=None, limit=100):
        self.calls.append("list_transactions")
        return await self.inner.list_transactions(kind, user_id, date_from, date_to, limit)


class FailingInsertStore(InMemoryRecordStore):
    """Lookups and creation work; every insert fails."""

    async def insert_transaction(self, kind, user_id, entity_id, amount, entry_date):
        raise StorageError("sheet is read-only")


class FailingSumStore(InMemoryRecordStore):
    """Expense totals fail; everything else works."""

    async def sum_amounts(self, kind, user_id, date_from, date_to):
        if kind == TransactionKind.EXPENSE:
            raise StorageError("timeout reading Expenses")
        return await super().sum_amounts(kind, user_id, date_from, date_to)


class FakeSpeechChannel(SpeechChannel):
    """Scripted speech channel that remembers what it was asked."""

    def __init__(
        self,
        transcript: str = "",
        audio: Optional[bytes] = b"ID3-fake-mp3",
        stt_error: bool = False,
        tts_error: bool = False,
    ):
        self.transcript = transcript
        self.audio = audio
        self.stt_error = stt_error
        self.tts_error = tts_error
        self.transcribed: list[tuple[bytes, str]] = []
        self.spoken: list[str] = []

    async def speech_to_text(self, audio, filename="recording.mp4"):
        self.transcribed.append((audio, filename))
        if self.stt_error:
            raise SpeechError("Speech-to-text failed: 500", status_code=500)
        return self.transcript

    async def text_to_speech(self, text):
        self.spoken.append(text)
        if self.tts_error:
            raise SpeechError("Text-to-speech failed: 429", status_code=429)
        return self.audio


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Record store seeded with the global defaults."""
    return InMemoryRecordStore()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def executor(store, audit_storage) -> CommandExecutor:
    """Executor over the seeded store with today pinned to 2024-03-15."""
    return CommandExecutor(
        store,
        audit_logger=AuditLogger(audit_storage),
        today=lambda: TODAY,
    )


def entity_names(store: InMemoryRecordStore, kind: EntityKind, user_id: str = USER_ID) -> list[str]:
    """Display names of the entities of `kind` owned by `user_id`."""
    return [
        e.display_name for e in store.entities
        if e.kind == kind and e.owner_user_id == user_id
    ]


def amounts(store: InMemoryRecordStore, kind: TransactionKind) -> list[Decimal]:
    return [r.amount for r in store.transactions if r.kind == kind]
