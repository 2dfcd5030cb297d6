"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a JSON file as the backend, but designed to be swappable.
"""

from bankcli.services.storage.interface import (
    AuditStorageInterface,
    CorruptedDataError,
    LedgerStorageInterface,
    StorageError,
)
from bankcli.services.storage.audit_file import JsonLinesAuditStorage
from bankcli.services.storage.json_file import CORRUPTED_WARNING, JsonFileLedgerStorage
from bankcli.services.storage.memory import InMemoryAuditStorage, InMemoryLedgerStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "CorruptedDataError",
    "StorageError",
    # Implementations
    "CORRUPTED_WARNING",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
]
