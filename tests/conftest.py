"""
Shared fixtures for BankCLI tests.

Every test gets its own store, storage and audit trail; nothing touches
the real working directory.
"""

import random
from decimal import Decimal

import pytest

from bankcli.audit import AuditLogger
from bankcli.config import get_settings
from bankcli.ledger import AccountStore, LedgerService
from bankcli.models.account import Account, TransactionType
from bankcli.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test from an empty directory with fresh settings."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "BANKCLI_STORAGE_DATA_PATH",
        "BANKCLI_STORAGE_AUDIT_PATH",
        "BANKCLI_STORAGE_INDENT",
        "BANKCLI_LEDGER_ACCOUNT_ID_PREFIX",
        "LOG_LEVEL",
        "DEBUG_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def store(rng):
    return AccountStore(rng=rng)


@pytest.fixture
def ledger_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def service(store, ledger_storage, audit_storage):
    return LedgerService(store, ledger_storage, AuditLogger(audit_storage))


def make_account(account_id: str, holder_name: str, balance: str = "0") -> Account:
    """A reconciled account holding `balance` through a single deposit."""
    account = Account(id=account_id, holder_name=holder_name)
    account.record(TransactionType.DEPOSIT, Decimal(balance), "Initial deposit")
    return account
