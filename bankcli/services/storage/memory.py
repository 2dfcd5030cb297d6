"""
In-Memory Storage Implementations

Used for tests and for running the ledger without touching disk.
Saved documents are kept as plain dicts, exactly as they would be
written to a file, so tests can inspect what was persisted.
"""

import asyncio
from typing import Optional

from bankcli.models.account import Account, LedgerDocument, LoadResult
from bankcli.models.audit import AuditEvent
from bankcli.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    StorageError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    Ledger storage backed by a list of saved documents.

    Args:
        document: Initial persisted document, or None for "nothing saved yet"
        save_delay: Seconds each save takes, to make saves observable in flight
        fail_saves: Raise StorageError on every save
    """

    def __init__(
        self,
        document: Optional[dict] = None,
        save_delay: float = 0.0,
        fail_saves: bool = False,
    ):
        self._initial = document
        self.save_delay = save_delay
        self.fail_saves = fail_saves
        self.saved_documents: list[dict] = []

    @property
    def last_saved(self) -> Optional[dict]:
        return self.saved_documents[-1] if self.saved_documents else None

    async def load(self) -> LoadResult:
        if self._initial is None:
            self.saved_documents.append(LedgerDocument().to_document())
            return LoadResult(created=True)

        accounts = [Account.model_validate(entry) for entry in self._initial.get("accounts", [])]
        return LoadResult(accounts=accounts)

    async def save(self, document: LedgerDocument) -> bool:
        payload = document.to_document()
        if self.save_delay:
            await asyncio.sleep(self.save_delay)
        if self.fail_saves:
            raise StorageError("Simulated save failure")
        self.saved_documents.append(payload)
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit trail kept in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
