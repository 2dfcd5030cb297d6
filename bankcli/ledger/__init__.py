"""Ledger engine package: account store, save coordination and operations."""

from bankcli.ledger.errors import AccountNotFoundError, DuplicateAccountError, LedgerError
from bankcli.ledger.persistence import SaveCoordinator
from bankcli.ledger.service import LedgerService
from bankcli.ledger.store import AccountStore

__all__ = [
    "AccountNotFoundError",
    "AccountStore",
    "DuplicateAccountError",
    "LedgerError",
    "LedgerService",
    "SaveCoordinator",
]
