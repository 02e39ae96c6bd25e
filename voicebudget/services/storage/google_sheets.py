"""
Google Sheets Storage Implementation

Each table of the record store is a worksheet:

    IncomeSources  id | user_id | name | is_custom | created_at
    Categories     id | user_id | name | is_custom | created_at
    Incomes        id | user_id | source_id   | amount | date | created_at
    Expenses       id | user_id | category_id | amount | date | created_at
    AuditLog       see AUDIT_COLUMNS

Global defaults are rows with an empty user_id. Worksheets are created
with their header row on first use. Filtering and summing happen in
Python over all rows.

Reads are retried on failure. Transaction inserts are attempted once.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID, uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from voicebudget.config import get_settings
from voicebudget.models.audit import AuditEvent, AuditEventType, AuditSeverity
from voicebudget.models.records import (
    EntityKind,
    NamedEntity,
    TransactionKind,
    TransactionRecord,
)
from voicebudget.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    RecordStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


ENTITY_COLUMNS = [
    "id",
    "user_id",
    "name",
    "is_custom",
    "created_at",
]

INCOME_COLUMNS = [
    "id",
    "user_id",
    "source_id",
    "amount",
    "date",
    "created_at",
]

EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "category_id",
    "amount",
    "date",
    "created_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet creation.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_entity_sheet(self, kind: EntityKind) -> gspread.Worksheet:
        if kind == EntityKind.SOURCE:
            title = self._settings.income_sources_sheet_name
        else:
            title = self._settings.categories_sheet_name
        return self.get_worksheet(title, ENTITY_COLUMNS)

    def get_transaction_sheet(self, kind: TransactionKind) -> gspread.Worksheet:
        if kind == TransactionKind.INCOME:
            return self.get_worksheet(self._settings.incomes_sheet_name, INCOME_COLUMNS)
        return self.get_worksheet(self._settings.expenses_sheet_name, EXPENSE_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,
        )


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    One entity or transaction per row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _entity_to_row(self, entity: NamedEntity) -> list:
        return [
            entity.id,
            entity.owner_user_id or "",
            entity.display_name,
            str(entity.is_custom),
            entity.created_at.isoformat(),
        ]

    def _row_to_entity(self, kind: EntityKind, row: list) -> NamedEntity:
        created_at = _safe_get(row, 4)
        return NamedEntity(
            id=_safe_get(row, 0),
            kind=kind,
            owner_user_id=_safe_get(row, 1) or None,
            display_name=_safe_get(row, 2),
            is_custom=_safe_get(row, 3).lower() == "true",
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.min,
        )

    def _record_to_row(self, record: TransactionRecord) -> list:
        return [
            record.id,
            record.owner_user_id,
            record.entity_id,
            str(record.amount),
            record.entry_date.isoformat(),
            record.created_at.isoformat(),
        ]

    def _row_to_record(self, kind: TransactionKind, row: list) -> TransactionRecord:
        return TransactionRecord(
            id=_safe_get(row, 0),
            kind=kind,
            owner_user_id=_safe_get(row, 1),
            entity_id=_safe_get(row, 2),
            amount=Decimal(_safe_get(row, 3)),
            entry_date=date.fromisoformat(_safe_get(row, 4)),
            created_at=datetime.fromisoformat(_safe_get(row, 5)),
        )

    def _load_entities(self, kind: EntityKind, user_id: str) -> list[NamedEntity]:
        sheet = self._client.get_entity_sheet(kind)
        all_rows = sheet.get_all_values()[1:]  # Skip header

        entities = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                entity = self._row_to_entity(kind, row)
            except ValueError as e:
                logger.warning("malformed_entity_row", kind=kind.value, row_id=row[0], error=str(e))
                continue
            if entity.is_visible_to(user_id):
                entities.append(entity)

        entities.sort(key=lambda e: e.sort_key())
        return entities

    def _load_records(self, kind: TransactionKind, user_id: str) -> list[TransactionRecord]:
        sheet = self._client.get_transaction_sheet(kind)
        all_rows = sheet.get_all_values()[1:]

        records = []
        for row in all_rows:
            if not row or not row[0] or _safe_get(row, 1) != user_id:
                continue
            try:
                records.append(self._row_to_record(kind, row))
            except (ValueError, InvalidOperation) as e:
                logger.warning("malformed_transaction_row", kind=kind.value, row_id=row[0], error=str(e))
                continue
        return records

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def find_entity(
        self,
        kind: EntityKind,
        user_id: str,
        name: str,
    ) -> Optional[str]:
        try:
            for entity in self._load_entities(kind, user_id):
                if entity.matches(name):
                    return entity.id
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to look up {kind.value}: {e}")

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
        try:
            sheet = self._client.get_entity_sheet(kind)
            sheet.append_row(self._entity_to_row(entity), value_input_option="RAW")
            return entity.id
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to create {kind.value}: {e}")

    async def insert_transaction(
        self,
        kind: TransactionKind,
        user_id: str,
        entity_id: str,
        amount: Decimal,
        entry_date: date,
    ) -> str:
        record = TransactionRecord(
            kind=kind,
            owner_user_id=user_id,
            entity_id=entity_id,
            amount=amount,
            entry_date=entry_date,
        )
        try:
            sheet = self._client.get_transaction_sheet(kind)
            sheet.append_row(self._record_to_row(record), value_input_option="RAW")
            return record.id
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save {kind.value}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def sum_amounts(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        try:
            records = self._load_records(kind, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to total {kind.value}: {e}")

        return sum(
            (r.amount for r in records if date_from <= r.entry_date <= date_to),
            Decimal("0"),
        )

    async def list_entities(
        self,
        kind: EntityKind,
        user_id: str,
    ) -> list[NamedEntity]:
        try:
            return self._load_entities(kind, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {kind.value}: {e}")

    async def list_transactions(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100,
    ) -> list[TransactionRecord]:
        try:
            records = self._load_records(kind, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {kind.value}: {e}")

        if date_from:
            records = [r for r in records if r.entry_date >= date_from]
        if date_to:
            records = [r for r in records if r.entry_date <= date_to]

        # Newest first
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    def seed_defaults(self, entities: list[NamedEntity]) -> int:
        """
        Append global default entities that are not in the sheet yet.

        Returns the number of rows written.
        """
        written = 0
        for kind in EntityKind:
            sheet = self._client.get_entity_sheet(kind)
            existing = {
                _safe_get(row, 2).casefold()
                for row in sheet.get_all_values()[1:]
                if row and not _safe_get(row, 1)
            }
            for entity in entities:
                if entity.kind != kind or entity.display_name.casefold() in existing:
                    continue
                sheet.append_row(self._entity_to_row(entity), value_input_option="RAW")
                existing.add(entity.display_name.casefold())
                written += 1
        return written


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        return AuditEvent(
            event_id=UUID(_safe_get(row, 0)) if _safe_get(row, 0) else uuid4(),
            timestamp=datetime.fromisoformat(_safe_get(row, 1)),
            event_type=AuditEventType(_safe_get(row, 2)),
            severity=AuditSeverity(_safe_get(row, 3)),
            user_id=_safe_get(row, 4) or None,
            entity_type=_safe_get(row, 5) or None,
            entity_id=_safe_get(row, 6) or None,
            correlation_id=UUID(_safe_get(row, 7)) if _safe_get(row, 7) else None,
            description=_safe_get(row, 8),
            details=json.loads(_safe_get(row, 9)) if _safe_get(row, 9) else {},
            error_message=_safe_get(row, 10) or None,
            is_user_action=_safe_get(row, 11).lower() == "true",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging must not break the main flow
            logger.warning("audit_event_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]

            events = []
            for row in all_rows:
                if row and row[0]:
                    try:
                        events.append(self._row_to_event(row))
                    except ValueError:
                        continue

            # Sort newest first
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
