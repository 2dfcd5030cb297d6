"""
Main Orchestrator for BankCLI

This module ties the components together:
storage → load → account store → ledger service (+ audit logger).

DESIGN DECISION: Loading never fails the startup.
- No document yet: start empty (the storage writes an empty one)
- Unreadable document: start empty and surface a warning
- Damaged entries: skipped or filtered, the rest of the ledger survives

Whatever the front-end is, it only ever talks to the LedgerService
this module returns.
"""

import random
from pathlib import Path
from typing import Optional

import structlog

from bankcli.audit import AuditLogger
from bankcli.config import get_settings
from bankcli.ledger import AccountStore, LedgerService
from bankcli.models.account import LoadResult
from bankcli.models.audit import AuditEventBuilder
from bankcli.services.storage import (
    AuditStorageInterface,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)


async def create_ledger_service(
    storage: Optional[LedgerStorageInterface] = None,
    data_path: Optional[Path] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    audit_path: Optional[Path] = None,
    rng: Optional[random.Random] = None,
) -> tuple[LedgerService, LoadResult]:
    """
    Factory function to load the ledger and build the service around it.

    Args:
        storage: Persistence gateway. Defaults to the JSON file at
                 `data_path` (or the configured path).
        data_path: Ledger file to use when no storage is given
        audit_storage: Optional audit backend; local logging always happens
        audit_path: JSON Lines audit file to use when no audit storage is
                    given (falls back to the configured path, if any)
        rng: Random source for account ids

    Returns:
        (ledger_service, load_result). The load result carries any
        warnings the front-end should show.
    """
    settings = get_settings()
    storage = storage or JsonFileLedgerStorage(path=data_path)
    audit_path = audit_path or settings.storage.audit_path
    if audit_storage is None and audit_path is not None:
        audit_storage = JsonLinesAuditStorage(audit_path, settings.storage.save_retry_attempts)
    audit_logger = AuditLogger(audit_storage)

    loaded = await storage.load()

    if loaded.corrupted:
        await audit_logger.log(AuditEventBuilder.ledger_corrupted(loaded.warnings))
    else:
        await audit_logger.log(AuditEventBuilder.ledger_loaded(len(loaded.accounts), loaded.created))

    store = AccountStore(loaded.accounts, rng=rng)
    service = LedgerService(
        store=store,
        storage=storage,
        audit_logger=audit_logger,
        currency_symbol=settings.ledger.currency_symbol,
    )

    logger.info(
        "ledger_ready",
        environment=settings.app.app_environment,
        account_count=len(store),
        created=loaded.created,
        corrupted=loaded.corrupted,
    )
    return service, loaded
