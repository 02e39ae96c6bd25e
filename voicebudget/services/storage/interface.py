"""
Abstract Storage Interface

The executor only needs a handful of record store operations:

1. find an income source / category by name (case-insensitive)
2. create a custom source / category for a user
3. insert an income / expense record
4. sum amounts for a user over a date range

Listing operations are provided for front ends that show history.
Any backend (Google Sheets, in-memory, a SQL database) implements
this interface; business logic never talks to a backend directly.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from voicebudget.models.audit import AuditEvent
from voicebudget.models.records import (
    EntityKind,
    NamedEntity,
    TransactionKind,
    TransactionRecord,
)


class RecordStoreInterface(ABC):
    """
    Abstract interface for the financial record store.

    Entity lookups see the user's visible set: global defaults plus the
    entities owned by that user.
    """

    @abstractmethod
    async def find_entity(
        self,
        kind: EntityKind,
        user_id: str,
        name: str,
    ) -> Optional[str]:
        """
        Find a visible entity whose display name equals `name`, ignoring case.

        When several match, the first in the visible-set ordering
        (defaults first, then by name, then by id) is returned.

        Args:
            kind: Source or category
            user_id: User whose visible set is searched
            name: Name to match

        Returns:
            The entity id, or None if nothing matches

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create_entity(
        self,
        kind: EntityKind,
        user_id: str,
        display_name: str,
    ) -> str:
        """
        Create a custom entity owned by `user_id`.

        Returns:
            The new entity id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def insert_transaction(
        self,
        kind: TransactionKind,
        user_id: str,
        entity_id: str,
        amount: Decimal,
        entry_date: date,
    ) -> str:
        """
        Append an income or expense record.

        Returns:
            The new record id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def sum_amounts(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        """
        Sum the user's records of `kind` dated within [date_from, date_to].

        Returns:
            Total amount (0 when there are no records)
        """
        pass

    @abstractmethod
    async def list_entities(
        self,
        kind: EntityKind,
        user_id: str,
    ) -> list[NamedEntity]:
        """List the user's visible entities in deterministic order."""
        pass

    @abstractmethod
    async def list_transactions(
        self,
        kind: TransactionKind,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100,
    ) -> list[TransactionRecord]:
        """
        List the user's records, newest first.

        Args:
            kind: Income or expense
            user_id: Owner of the records
            date_from: Only records on or after this date
            date_to: Only records on or before this date
            limit: Maximum number of results
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
