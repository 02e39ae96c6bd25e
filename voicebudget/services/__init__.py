"""Services package."""

from voicebudget.services.speech import (
    ElevenLabsSpeechChannel,
    SimulatedSpeechChannel,
    SpeechChannel,
    SpeechError,
)
from voicebudget.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    # Speech services
    "ElevenLabsSpeechChannel",
    "SimulatedSpeechChannel",
    "SpeechChannel",
    "SpeechError",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
]
