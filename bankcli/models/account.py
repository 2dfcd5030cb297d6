"""
Core Data Models for BankCLI

These models define the fixed shapes of everything the ledger stores or
returns. They are designed to:
1. Keep Account and Transaction records fixed-shape (no open dicts)
2. Carry money as Decimal, never float
3. Serialize to the persisted camelCase JSON document
4. Give every rejection a distinct, machine-checkable reason

DESIGN DECISION: Validation results are returned, not raised.
Every rejection is local and recoverable, so callers branch on
`valid` / `success` instead of catching exceptions.
"""

from contextlib import AbstractContextManager
from datetime import datetime, timezone
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)


def _to_decimal(value: Any) -> Any:
    # Floats go through str() so 100.25 stays Decimal("100.25").
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _to_stored_balance(value: Any) -> Decimal:
    """
    Read a persisted balance without rejecting the account.

    Anything that is not a finite number becomes NaN, which the
    integrity sweep then keeps out of listings.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return Decimal("NaN")
    try:
        balance = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        return Decimal("NaN")
    return balance if balance.is_finite() else Decimal("NaN")


def _to_holder_name(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _to_number(value: Decimal) -> float | int:
    if value.is_nan():
        return float("nan")
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def exact_arithmetic() -> AbstractContextManager:
    """Decimal context in which additions and subtractions never round."""
    return localcontext(Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN))


Money = Annotated[
    Decimal,
    BeforeValidator(_to_decimal),
    PlainSerializer(_to_number, when_used="json"),
]

StoredBalance = Annotated[
    Decimal,
    BeforeValidator(_to_stored_balance),
    PlainSerializer(_to_number, when_used="json"),
]

HolderName = Annotated[str, BeforeValidator(_to_holder_name)]


def utc_now() -> datetime:
    """Current instant, timezone aware."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Kinds of balance movements.

    The sign of a transaction is implied by its type; amounts are
    always stored as positive magnitudes.
    """
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"

    @property
    def is_credit(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.TRANSFER_IN)


class RejectionReason(str, Enum):
    """
    Machine-readable reason codes.

    Each validation rule has its own code so tests and callers can tell
    rejections apart even where the user-facing text is similar.
    """
    EMPTY_NAME = "empty_name"
    INVALID_NAME_CHARACTERS = "invalid_name_characters"
    DUPLICATE_NAME = "duplicate_name"

    EMPTY_AMOUNT = "empty_amount"
    FULL_WIDTH_DIGITS = "full_width_digits"
    COMMA_SEPARATOR = "comma_separator"
    INVALID_FORMAT = "invalid_format"
    NOT_A_NUMBER = "not_a_number"
    NEGATIVE_AMOUNT = "negative_amount"
    TOO_MANY_DECIMALS = "too_many_decimals"
    INSUFFICIENT_BALANCE = "insufficient_balance"

    ACCOUNT_NOT_FOUND = "account_not_found"
    SOURCE_NOT_FOUND = "source_not_found"
    DESTINATION_NOT_FOUND = "destination_not_found"
    ACCOUNT_DAMAGED = "account_damaged"

    CONFIRMATION_REQUIRED = "confirmation_required"


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single balance movement on one account.

    CRITICAL: Transactions are never edited once appended.
    The model is frozen so an accidental assignment fails loudly.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: TransactionType = Field(
        ...,
        description="Kind of movement"
    )
    amount: Money = Field(
        ...,
        ge=0,
        description="Magnitude of the movement; zero only for an empty opening deposit"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the movement was applied"
    )
    balance_after: Money = Field(
        ...,
        alias="balanceAfter",
        description="Owning account's balance right after this movement"
    )
    description: str = Field(
        default="",
        description="Free text, e.g. the counterparty account id"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction implied by the type applied."""
        return self.amount if self.type.is_credit else self.amount.copy_negate()


class Account(BaseModel):
    """
    A ledger account.

    The balance must always equal the signed sum of the transactions,
    and the balance_after of the latest transaction. Only `record()`
    changes the balance, and it appends the matching transaction in
    the same step.

    Holder name rules are enforced when an account is opened, not here:
    this model must still be able to represent damaged persisted entries
    so the integrity sweep can exclude them.
    """
    model_config = ConfigDict(populate_by_name=True, ser_json_inf_nan="constants")

    id: str = Field(
        ...,
        min_length=1,
        description="Unique account id (e.g. ACC-1234)"
    )
    holder_name: HolderName = Field(
        default="",
        alias="holderName",
        description="Account holder name"
    )
    balance: StoredBalance = Field(
        default=Decimal("0"),
        allow_inf_nan=True,
        description="Current balance; NaN when the stored value was not a number"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        alias="createdAt",
        description="When the account was opened"
    )
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Append-only movement history, oldest first"
    )

    def record(
        self,
        tx_type: TransactionType,
        amount: Decimal,
        description: str,
        timestamp: Optional[datetime] = None,
    ) -> Transaction:
        """
        Apply a movement and append its transaction.

        No validation happens here; callers validate first.
        """
        with exact_arithmetic():
            new_balance = self.balance + amount if tx_type.is_credit else self.balance - amount
        transaction = Transaction(
            type=tx_type,
            amount=amount,
            timestamp=timestamp or utc_now(),
            balance_after=new_balance,
            description=description,
        )
        self.balance = new_balance
        self.transactions.append(transaction)
        return transaction

    @property
    def transaction_total(self) -> Decimal:
        """Signed sum of every recorded transaction."""
        with exact_arithmetic():
            return sum((tx.signed_amount for tx in self.transactions), Decimal("0"))

    @property
    def is_reconciled(self) -> bool:
        """Does the balance agree with the transaction history?"""
        if self.balance.is_nan():
            return False
        if self.balance != self.transaction_total:
            return False
        if self.transactions and self.transactions[-1].balance_after != self.balance:
            return False
        return True

    def to_document(self) -> dict:
        """Persisted (camelCase, JSON-ready) representation."""
        return self.model_dump(mode="json", by_alias=True)


class LedgerDocument(BaseModel):
    """The whole persisted state: `{"accounts": [...]}`."""

    accounts: list[Account] = Field(default_factory=list)

    def to_document(self) -> dict:
        return {"accounts": [account.to_document() for account in self.accounts]}


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationResult(BaseModel):
    """
    Outcome of one validation rule.

    On success `amount` or `account` carries the accepted value,
    depending on what was validated.
    """

    valid: bool
    error: Optional[str] = Field(
        default=None,
        description="Human-readable reason, shown to the user verbatim"
    )
    reason: Optional[RejectionReason] = None
    amount: Optional[Decimal] = None
    account: Optional[Account] = None

    @classmethod
    def ok(cls, **payload: Any) -> "ValidationResult":
        return cls(valid=True, **payload)

    @classmethod
    def reject(cls, reason: RejectionReason, error: str) -> "ValidationResult":
        return cls(valid=False, reason=reason, error=error)


class DeletionCheck(BaseModel):
    """
    Result of checking whether an account may be deleted.

    This is never a hard rejection: a positive balance only means the
    user has to confirm first.
    """

    requires_confirmation: bool
    message: Optional[str] = None


# =============================================================================
# OPERATION / QUERY RESULTS
# =============================================================================

class OperationResult(BaseModel):
    """Outcome of a ledger operation (open, deposit, withdraw, transfer, delete)."""

    success: bool
    error_message: Optional[str] = None
    reason: Optional[RejectionReason] = None
    requires_confirmation: bool = Field(
        default=False,
        description="Operation was declined pending user confirmation"
    )
    account: Optional[Account] = Field(
        default=None,
        description="The account the operation acted on (source for transfers)"
    )
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Transactions appended by this operation"
    )

    @property
    def declined(self) -> bool:
        """Soft rejection: nothing was wrong, but nothing was done either."""
        return not self.success and self.requires_confirmation

    @classmethod
    def failed(cls, result: ValidationResult) -> "OperationResult":
        return cls(success=False, error_message=result.error, reason=result.reason)


class QueryResult(BaseModel):
    """Result of a read-only query against the ledger."""

    success: bool
    error_message: Optional[str] = None
    reason: Optional[RejectionReason] = None
    account: Optional[Account] = None
    transactions: list[Transaction] = Field(default_factory=list)


class AccountListing(BaseModel):
    """Accounts fit for display, after the integrity sweep."""

    accounts: list[Account] = Field(default_factory=list)
    has_invalid: bool = Field(
        default=False,
        description="Were any stored accounts excluded as damaged?"
    )

    @property
    def total_accounts(self) -> int:
        return len(self.accounts)

    @property
    def total_balance(self) -> Decimal:
        with exact_arithmetic():
            return sum((account.balance for account in self.accounts), Decimal("0"))


class LoadResult(BaseModel):
    """What a storage backend found when loading the ledger."""

    accounts: list[Account] = Field(default_factory=list)
    created: bool = Field(
        default=False,
        description="No document existed; an empty one was written"
    )
    corrupted: bool = Field(
        default=False,
        description="Document was unreadable and has been ignored"
    )
    warnings: list[str] = Field(default_factory=list)
