"""
Storage Services Package

Provides the abstract record store interface and its implementations:
Google Sheets for persistent data, in-memory for tests and local use.
"""

from voicebudget.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from voicebudget.services.storage.memory import (
    DEFAULT_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    default_entities,
)
from voicebudget.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "DEFAULT_CATEGORIES",
    "DEFAULT_INCOME_SOURCES",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "default_entities",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
]
