"""
Ledger Operations

The five state transitions of the ledger: open, deposit, withdraw,
transfer and delete. Each one follows the same shape:

1. Run every applicable check first; the first failure returns a
   rejection and nothing has been touched
2. Apply all balance and history changes with no `await` in between,
   so no other coroutine can observe a half-applied operation
3. Ask the SaveCoordinator for a background save
4. Audit the outcome and return

CRITICAL: Step 2 is the only place balances change, and every balance
change goes through Account.record(), which appends the matching
transaction. The balance therefore always equals the signed sum of the
account's transactions.
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

import structlog

from bankcli.audit import AuditLogger
from bankcli.config import get_settings
from bankcli.ledger.persistence import SaveCoordinator
from bankcli.ledger.store import AccountStore
from bankcli.models.account import (
    Account,
    AccountListing,
    OperationResult,
    QueryResult,
    RejectionReason,
    TransactionType,
    ValidationResult,
    utc_now,
)
from bankcli.models.audit import AuditEvent, AuditEventBuilder
from bankcli.queries import QueryExecutor
from bankcli.services.storage import LedgerStorageInterface
from bankcli.validation import (
    validate_account_deletion,
    validate_account_exists,
    validate_account_intact,
    validate_amount,
    validate_duplicate_name,
    validate_holder_name,
    validate_transfer_destination,
    validate_transfer_source,
)


AmountInput = Union[str, Decimal, int, None]


def _raw_amount(amount: AmountInput) -> Optional[str]:
    # Amounts are validated as typed text; programmatic callers may pass numbers.
    if amount is None or isinstance(amount, str):
        return amount
    if isinstance(amount, Decimal):
        # Plain notation: str(Decimal("1E+2")) would be "1E+2"
        return format(amount, "f")
    return str(amount)


class LedgerService:
    """
    Owns the ledger and is the only writer to it.

    Args:
        store: The account collection this service owns exclusively
        storage: Persistence gateway, called after every successful operation
        audit_logger: Optional audit trail
    """

    def __init__(
        self,
        store: AccountStore,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        currency_symbol: Optional[str] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._saver = SaveCoordinator(storage, store.to_document, audit_logger)
        self._queries = QueryExecutor(store)
        self._currency_symbol = currency_symbol or get_settings().ledger.currency_symbol
        self._logger = structlog.get_logger(__name__)

    @property
    def store(self) -> AccountStore:
        return self._store

    @property
    def saver(self) -> SaveCoordinator:
        return self._saver

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def open_account(
        self,
        holder_name: str,
        initial_amount: AmountInput,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Open an account funded by an initial deposit."""
        for check in (
            lambda: validate_holder_name(holder_name),
            lambda: validate_duplicate_name(holder_name, self._store),
        ):
            result = check()
            if not result.valid:
                return await self._reject("open", result, correlation_id=correlation_id)

        amount_check = validate_amount(_raw_amount(initial_amount))
        if not amount_check.valid:
            return await self._reject("open", amount_check, correlation_id=correlation_id)

        amount = amount_check.amount
        now = utc_now()
        account = Account(
            id=self._store.generate_id(),
            holder_name=holder_name,
            balance=Decimal("0"),
            created_at=now,
        )
        seed = account.record(TransactionType.DEPOSIT, amount, "Initial deposit", timestamp=now)
        self._store.add(account)

        await self._saver.request_save()
        self._logger.info("account_opened", account_id=account.id)
        await self._audit(AuditEventBuilder.account_opened(
            account.id, holder_name, str(amount), correlation_id=correlation_id,
        ))

        return OperationResult(success=True, account=account, transactions=[seed])

    async def deposit(
        self,
        account_id: str,
        amount: AmountInput,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Add money to an account."""
        found = self._find_intact(account_id)
        if not found.valid:
            return await self._reject("deposit", found, account_id, correlation_id=correlation_id)
        account = found.account

        amount_check = validate_amount(_raw_amount(amount))
        if not amount_check.valid:
            return await self._reject("deposit", amount_check, account.id, correlation_id=correlation_id)

        transaction = account.record(TransactionType.DEPOSIT, amount_check.amount, "Deposit")

        await self._saver.request_save()
        self._logger.info("deposit_recorded", account_id=account.id)
        await self._audit(AuditEventBuilder.deposit_recorded(
            account.id, str(transaction.amount), str(transaction.balance_after),
            correlation_id=correlation_id,
        ))

        return OperationResult(success=True, account=account, transactions=[transaction])

    async def withdraw(
        self,
        account_id: str,
        amount: AmountInput,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Take money out of an account, never below zero."""
        found = self._find_intact(account_id)
        if not found.valid:
            return await self._reject("withdraw", found, account_id, correlation_id=correlation_id)
        account = found.account

        amount_check = validate_amount(_raw_amount(amount), current_balance=account.balance)
        if not amount_check.valid:
            return await self._reject("withdraw", amount_check, account.id, correlation_id=correlation_id)

        transaction = account.record(TransactionType.WITHDRAWAL, amount_check.amount, "Withdrawal")

        await self._saver.request_save()
        self._logger.info("withdrawal_recorded", account_id=account.id)
        await self._audit(AuditEventBuilder.withdrawal_recorded(
            account.id, str(transaction.amount), str(transaction.balance_after),
            correlation_id=correlation_id,
        ))

        return OperationResult(success=True, account=account, transactions=[transaction])

    async def transfer(
        self,
        from_id: str,
        to_id: str,
        amount: AmountInput,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Move money between two accounts as one step.

        The destination is checked before anything happens to the source,
        so a bad destination leaves the source exactly as it was. Both
        legs share one timestamp.
        """
        source_check = validate_transfer_source(from_id, self._store)
        if not source_check.valid:
            return await self._reject("transfer", source_check, from_id, correlation_id=correlation_id)

        destination_check = validate_transfer_destination(to_id, self._store)
        if not destination_check.valid:
            return await self._reject("transfer", destination_check, from_id, correlation_id=correlation_id)

        source = source_check.account
        destination = destination_check.account
        for account in (source, destination):
            intact = validate_account_intact(account)
            if not intact.valid:
                return await self._reject("transfer", intact, account.id, correlation_id=correlation_id)

        amount_check = validate_amount(_raw_amount(amount), current_balance=source.balance)
        if not amount_check.valid:
            return await self._reject("transfer", amount_check, source.id, correlation_id=correlation_id)

        value = amount_check.amount
        timestamp = utc_now()
        outgoing = source.record(
            TransactionType.TRANSFER_OUT, value, f"To {destination.id}", timestamp=timestamp,
        )
        incoming = destination.record(
            TransactionType.TRANSFER_IN, value, f"From {source.id}", timestamp=timestamp,
        )

        await self._saver.request_save()
        self._logger.info("transfer_completed", from_account_id=source.id, to_account_id=destination.id)
        await self._audit(AuditEventBuilder.transfer_completed(
            source.id, destination.id, str(value), correlation_id=correlation_id,
        ))

        return OperationResult(success=True, account=source, transactions=[outgoing, incoming])

    async def delete_account(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Delete an account and its history.

        An account holding money is never deleted; the result is a
        declined operation carrying the confirmation warning.
        """
        found = validate_account_exists(account_id, self._store)
        if not found.valid:
            return await self._reject("delete", found, account_id, correlation_id=correlation_id)
        account = found.account

        deletion = validate_account_deletion(account, self._currency_symbol)
        if deletion.requires_confirmation:
            self._logger.info("deletion_declined", account_id=account.id)
            await self._audit(AuditEventBuilder.deletion_declined(
                account.id, str(account.balance), correlation_id=correlation_id,
            ))
            return OperationResult(
                success=False,
                requires_confirmation=True,
                reason=RejectionReason.CONFIRMATION_REQUIRED,
                error_message=deletion.message,
                account=account,
            )

        self._store.remove(account.id)

        await self._saver.request_save()
        self._logger.info("account_deleted", account_id=account.id)
        await self._audit(AuditEventBuilder.account_deleted(account.id, correlation_id=correlation_id))

        return OperationResult(success=True, account=account)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_accounts(self) -> AccountListing:
        return self._queries.list_accounts()

    def get_account(self, account_id: Optional[str]) -> QueryResult:
        return self._queries.get_account(account_id)

    def get_transaction_history(self, account_id: Optional[str]) -> QueryResult:
        return self._queries.get_transaction_history(account_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def shutdown(self) -> bool:
        """Best-effort final save. Returns True if it succeeded."""
        saved = await self._saver.flush()
        if not saved:
            self._logger.error("final_save_failed", error=self._saver.last_error)
        return saved

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _find_intact(self, account_id: Optional[str]) -> ValidationResult:
        found = validate_account_exists(account_id, self._store)
        if not found.valid:
            return found
        return validate_account_intact(found.account)

    async def _reject(
        self,
        operation: str,
        result: ValidationResult,
        account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        self._logger.info(
            "operation_rejected",
            operation=operation,
            reason=result.reason.value if result.reason else None,
            account_id=account_id,
        )
        await self._audit(AuditEventBuilder.operation_rejected(
            operation=operation,
            reason=result.reason.value if result.reason else "unknown",
            message=result.error or "",
            account_id=(account_id or "").strip() or None,
            correlation_id=correlation_id,
        ))
        return OperationResult.failed(result)

    async def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)
