"""
Audit Models for BankCLI

Every operation outcome in the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when a save or load goes wrong
3. A record of rejected and declined requests, not just successes

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from bankcli.models.account import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger operations
    ACCOUNT_OPENED = "account_opened"
    DEPOSIT_RECORDED = "deposit_recorded"
    WITHDRAWAL_RECORDED = "withdrawal_recorded"
    TRANSFER_COMPLETED = "transfer_completed"
    ACCOUNT_DELETED = "account_deleted"
    DELETION_DECLINED = "deletion_declined"
    OPERATION_REJECTED = "operation_rejected"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_CORRUPTED = "ledger_corrupted"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"
    SAVE_SKIPPED = "save_skipped"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every operation outcome creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which account is this about?
    account_id: Optional[str] = Field(
        default=None,
        description="Account the event relates to, if any"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g. one menu action)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "account_id": self.account_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_opened("ACC-1234", "Tatsuya", "100.25")
        event = AuditEventBuilder.save_failed("disk full")
    """

    @staticmethod
    def account_opened(
        account_id: str,
        holder_name: str,
        initial_amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_OPENED,
            account_id=account_id,
            correlation_id=correlation_id,
            description=f"Account opened for {holder_name}",
            details={
                "holder_name": holder_name,
                "initial_amount": initial_amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def deposit_recorded(
        account_id: str,
        amount: str,
        balance_after: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_RECORDED,
            account_id=account_id,
            correlation_id=correlation_id,
            description=f"Deposit of {amount}",
            details={
                "amount": amount,
                "balance_after": balance_after,
            },
            is_user_action=True,
        )

    @staticmethod
    def withdrawal_recorded(
        account_id: str,
        amount: str,
        balance_after: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_RECORDED,
            account_id=account_id,
            correlation_id=correlation_id,
            description=f"Withdrawal of {amount}",
            details={
                "amount": amount,
                "balance_after": balance_after,
            },
            is_user_action=True,
        )

    @staticmethod
    def transfer_completed(
        from_id: str,
        to_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            account_id=from_id,
            correlation_id=correlation_id,
            description=f"Transfer of {amount} from {from_id} to {to_id}",
            details={
                "from_account_id": from_id,
                "to_account_id": to_id,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            account_id=account_id,
            correlation_id=correlation_id,
            description=f"Account {account_id} deleted",
            is_user_action=True,
        )

    @staticmethod
    def deletion_declined(
        account_id: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETION_DECLINED,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            correlation_id=correlation_id,
            description="Deletion declined: account has remaining balance",
            details={
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        reason: str,
        message: str,
        account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            correlation_id=correlation_id,
            description=f"{operation.capitalize()} rejected: {message}",
            details={
                "operation": operation,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        account_count: int,
        created: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            description=(
                "New empty ledger created" if created
                else f"Ledger loaded with {account_count} accounts"
            ),
            details={
                "account_count": account_count,
                "created": created,
            },
        )

    @staticmethod
    def ledger_corrupted(warnings: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CORRUPTED,
            severity=AuditSeverity.WARNING,
            description="Ledger document unreadable, starting with empty data",
            details={
                "warnings": warnings,
            },
        )

    @staticmethod
    def ledger_saved(account_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            description=f"Ledger saved with {account_count} accounts",
            details={
                "account_count": account_count,
            },
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed to save data.",
            error_message=error_message,
        )

    @staticmethod
    def save_skipped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_SKIPPED,
            severity=AuditSeverity.DEBUG,
            description="Save skipped: another save is in flight",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
