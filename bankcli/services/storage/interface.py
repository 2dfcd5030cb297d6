"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger engine unaware of files and formats
2. Use in-memory storage for testing
3. Swap the JSON file for a database later
4. Keep business logic decoupled from storage implementation

The ledger is small and single-user, so the interface is whole-document:
load everything once at startup, overwrite everything on each save.
"""

from abc import ABC, abstractmethod

from bankcli.models.account import LedgerDocument, LoadResult
from bankcli.models.audit import AuditEvent


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (JSON file, in-memory, SQLite, ...)
    must implement these methods.
    """

    @abstractmethod
    async def load(self) -> LoadResult:
        """
        Load the persisted ledger.

        A missing document must yield an empty ledger (and create it).
        An unreadable document must yield an empty ledger flagged as
        corrupted, with a warning. This method must not raise for
        either case.

        Returns:
            LoadResult with the accounts found and any warnings
        """
        pass

    @abstractmethod
    async def save(self, document: LedgerDocument) -> bool:
        """
        Overwrite the persisted ledger with this document.

        Args:
            document: The complete ledger state

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the save fails
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

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptedDataError(StorageError):
    """Persisted data could not be parsed into a ledger."""
    pass
