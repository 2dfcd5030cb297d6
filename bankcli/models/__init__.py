"""
Data Models Package

This package contains all Pydantic models used by BankCLI.
All data flowing through the ledger must conform to these schemas.
"""

from bankcli.models.account import (
    Account,
    AccountListing,
    DeletionCheck,
    LedgerDocument,
    LoadResult,
    OperationResult,
    QueryResult,
    RejectionReason,
    Transaction,
    TransactionType,
    ValidationResult,
)
from bankcli.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "AccountListing",
    "DeletionCheck",
    "LedgerDocument",
    "LoadResult",
    "OperationResult",
    "QueryResult",
    "RejectionReason",
    "Transaction",
    "TransactionType",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
