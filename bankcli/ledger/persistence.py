"""
Save Coordination

Every successful ledger operation asks for the whole ledger to be saved.
Saves run in the background so no operation waits on disk, and at most
one save is in flight at any time:

- request_save() while idle: snapshot now, write in a background task
- request_save() while a save is in flight: dropped, not queued

Dropping is safe because memory is the source of truth and the next
operation requests another save. flush() exists for shutdown, where the
latest state must reach storage.
"""

import asyncio
from typing import Callable, Optional

import structlog

from bankcli.audit import AuditLogger
from bankcli.models.account import LedgerDocument
from bankcli.models.audit import AuditEvent, AuditEventBuilder
from bankcli.services.storage import LedgerStorageInterface, StorageError


class SaveCoordinator:
    """
    Single-slot guard in front of a LedgerStorageInterface.

    Args:
        storage: Where documents are written
        snapshot: Returns the current ledger state as a detached document
        audit_logger: Optional audit trail for save outcomes
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        snapshot: Callable[[], LedgerDocument],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._snapshot = snapshot
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

        self._saving = False
        self._task: Optional[asyncio.Task] = None

        self.last_error: Optional[str] = None
        self.completed_saves = 0
        self.failed_saves = 0
        self.skipped_saves = 0

    @property
    def in_flight(self) -> bool:
        return self._saving

    async def request_save(self) -> bool:
        """
        Start a background save unless one is already running.

        Returns True if a save was started, False if it was dropped.
        """
        if self._saving:
            self.skipped_saves += 1
            self._logger.debug("save_skipped")
            await self._audit(AuditEventBuilder.save_skipped())
            return False

        self._saving = True
        document = self._snapshot()
        self._task = asyncio.get_running_loop().create_task(self._write(document))
        return True

    async def wait_idle(self) -> None:
        """Wait for the in-flight save, if any, to finish."""
        if self._task is not None:
            await self._task

    async def flush(self) -> bool:
        """
        Save the current state and wait for it.

        Returns True if the final save succeeded.
        """
        await self.wait_idle()
        self._saving = True
        await self._write(self._snapshot())
        return self.last_error is None

    async def _write(self, document: LedgerDocument) -> None:
        error: Optional[str] = None
        crash: Optional[Exception] = None
        try:
            await self._storage.save(document)
        except StorageError as e:
            error = str(e)
        except Exception as e:
            # A background save has no caller to raise to; report it instead.
            self._logger.exception("save_crashed")
            error = f"{type(e).__name__}: {e}"
            crash = e
        finally:
            self._saving = False

        if error is not None:
            self.last_error = error
            self.failed_saves += 1
            self._logger.error("save_failed", error=error)
            await self._audit(AuditEventBuilder.save_failed(error))
            if crash is not None and self._audit_logger:
                await self._audit_logger.log_error(
                    type(crash).__name__,
                    str(crash),
                    details={"operation": "save", "account_count": len(document.accounts)},
                )
            return

        self.last_error = None
        self.completed_saves += 1
        self._logger.debug("ledger_saved", account_count=len(document.accounts))
        await self._audit(AuditEventBuilder.ledger_saved(len(document.accounts)))

    async def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)
