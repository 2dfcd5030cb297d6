"""
Ledger Input Validation

DESIGN DECISION: Every money-moving operation is gated by these checks
before any balance is touched. They are pure functions:

- No side effects, no storage access, no logging
- Each returns a ValidationResult instead of raising
- Each rejection carries its own RejectionReason and message,
  and the message is shown to the user verbatim

AMOUNT GATES run in a fixed order, first failure wins:
(a) empty  (b) full-width digits  (c) commas  (d) format
(e) parse  (f) negative  (g) more than 2 decimals  (h) over balance

IMPORTANT: Validation NEVER silently fixes input.
"1,000" is rejected, not read as 1000.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from bankcli.models.account import (
    Account,
    AccountListing,
    DeletionCheck,
    RejectionReason,
    ValidationResult,
)


HOLDER_NAME_PATTERN = re.compile(r"[A-Za-z\s]+")
FULL_WIDTH_DIGIT_PATTERN = re.compile(r"[０-９]")
# ASCII digits only; \d would also accept full-width and other Unicode digits.
AMOUNT_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]+)?")

MAX_DECIMAL_PLACES = 2


# =============================================================================
# HOLDER NAME
# =============================================================================

def validate_holder_name(name: Optional[str]) -> ValidationResult:
    """Names must be non-empty and contain only Latin letters and whitespace."""
    if not name or not name.strip():
        return ValidationResult.reject(
            RejectionReason.EMPTY_NAME,
            "Account holder name cannot be empty.",
        )

    if not HOLDER_NAME_PATTERN.fullmatch(name):
        return ValidationResult.reject(
            RejectionReason.INVALID_NAME_CHARACTERS,
            "Account holder name must contain only alphabetic characters.",
        )

    return ValidationResult.ok()


def validate_duplicate_name(name: str, accounts: Iterable[Account]) -> ValidationResult:
    """Reject a name already used by another account, ignoring case."""
    wanted = name.lower()
    if any(account.holder_name.lower() == wanted for account in accounts):
        return ValidationResult.reject(
            RejectionReason.DUPLICATE_NAME,
            "An account with this name already exists.",
        )

    return ValidationResult.ok()


# =============================================================================
# AMOUNT
# =============================================================================

def validate_amount(
    raw: Optional[str],
    allow_negative: bool = False,
    current_balance: Optional[Decimal] = None,
) -> ValidationResult:
    """
    Parse and check a user-typed amount.

    Args:
        raw: The amount exactly as typed
        allow_negative: Accept amounts below zero
        current_balance: If given, amounts above it are rejected

    Returns:
        ValidationResult with `amount` set to the exact Decimal on success
    """
    # (a) empty
    if raw is None or not raw.strip():
        return ValidationResult.reject(
            RejectionReason.EMPTY_AMOUNT,
            "Amount cannot be empty.",
        )

    # (b) full-width digits; (d) would catch these too, but the message differs
    if FULL_WIDTH_DIGIT_PATTERN.search(raw):
        return ValidationResult.reject(
            RejectionReason.FULL_WIDTH_DIGITS,
            "Full-width numbers are not allowed. Please use half-width numbers.",
        )

    # (c) thousands separators
    if "," in raw:
        return ValidationResult.reject(
            RejectionReason.COMMA_SEPARATOR,
            "Comma-separated numbers are not allowed.",
        )

    # (d) shape
    if not AMOUNT_PATTERN.fullmatch(raw.strip()):
        return ValidationResult.reject(
            RejectionReason.INVALID_FORMAT,
            "Invalid amount format. Please enter a valid number.",
        )

    # (e) parse
    try:
        amount = Decimal(raw.strip())
    except InvalidOperation:
        return ValidationResult.reject(
            RejectionReason.NOT_A_NUMBER,
            "Invalid amount. Please enter a valid number.",
        )
    if not amount.is_finite():
        return ValidationResult.reject(
            RejectionReason.NOT_A_NUMBER,
            "Invalid amount. Please enter a valid number.",
        )
    if amount.is_zero():
        # "-0" is zero, not a negative amount
        amount = abs(amount)

    # (f) sign
    if not allow_negative and amount < 0:
        return ValidationResult.reject(
            RejectionReason.NEGATIVE_AMOUNT,
            "Amount cannot be negative.",
        )

    # (g) precision, counted on the string as typed
    parts = raw.split(".")
    if len(parts) > 1 and len(parts[1]) > MAX_DECIMAL_PLACES:
        return ValidationResult.reject(
            RejectionReason.TOO_MANY_DECIMALS,
            "Amount cannot have more than 2 decimal places.",
        )

    # (h) ceiling
    if current_balance is not None and amount > current_balance:
        return ValidationResult.reject(
            RejectionReason.INSUFFICIENT_BALANCE,
            "Insufficient balance for this transaction.",
        )

    return ValidationResult.ok(amount=amount)


# =============================================================================
# ACCOUNT LOOKUP
# =============================================================================

def _find(account_id: Optional[str], accounts: Iterable[Account]) -> Optional[Account]:
    wanted = (account_id or "").strip()
    for account in accounts:
        if account.id == wanted:
            return account
    return None


def validate_account_exists(
    account_id: Optional[str],
    accounts: Iterable[Account],
) -> ValidationResult:
    """Look an account up by exact (trimmed) id."""
    account = _find(account_id, accounts)
    if account is None:
        return ValidationResult.reject(
            RejectionReason.ACCOUNT_NOT_FOUND,
            "Account not found.",
        )
    return ValidationResult.ok(account=account)


def validate_transfer_source(
    account_id: Optional[str],
    accounts: Iterable[Account],
) -> ValidationResult:
    """Same lookup as validate_account_exists, reported in the source role."""
    account = _find(account_id, accounts)
    if account is None:
        return ValidationResult.reject(
            RejectionReason.SOURCE_NOT_FOUND,
            "Source account not found.",
        )
    return ValidationResult.ok(account=account)


def validate_transfer_destination(
    account_id: Optional[str],
    accounts: Iterable[Account],
) -> ValidationResult:
    """Same lookup as validate_account_exists, reported in the destination role."""
    account = _find(account_id, accounts)
    if account is None:
        return ValidationResult.reject(
            RejectionReason.DESTINATION_NOT_FOUND,
            "Destination account not found. Transfer rejected.",
        )
    return ValidationResult.ok(account=account)


# =============================================================================
# INTEGRITY / DELETION
# =============================================================================

def is_account_intact(account: Account) -> bool:
    """An account is displayable if it has a name and a numeric balance."""
    if not account.holder_name or not account.holder_name.strip():
        return False
    if account.balance.is_nan():
        return False
    return True


def validate_account_intact(account: Account) -> ValidationResult:
    """Money can only move on accounts that pass the integrity sweep."""
    if not is_account_intact(account):
        return ValidationResult.reject(
            RejectionReason.ACCOUNT_DAMAGED,
            "Account data is invalid. Operation rejected.",
        )
    return ValidationResult.ok(account=account)


def filter_invalid_accounts(accounts: Iterable[Account]) -> AccountListing:
    """
    Integrity sweep over loaded accounts.

    Damaged accounts are excluded from the listing, never repaired
    and never removed from the store. Applying the sweep to its own
    output changes nothing.
    """
    accounts = list(accounts)
    valid_accounts = [account for account in accounts if is_account_intact(account)]
    return AccountListing(
        accounts=valid_accounts,
        has_invalid=len(valid_accounts) != len(accounts),
    )


def validate_account_deletion(
    account: Account,
    currency_symbol: str = "$",
) -> DeletionCheck:
    """
    Check whether deleting the account needs confirmation.

    A positive balance asks for confirmation; callers that cannot ask
    must treat that as "do not delete". A NaN balance is not positive,
    so damaged accounts can still be cleaned up.
    """
    if not account.balance.is_nan() and account.balance > 0:
        return DeletionCheck(
            requires_confirmation=True,
            message=(
                f"Warning: This account has a balance of "
                f"{currency_symbol}{account.balance:.2f}. "
                "Are you sure you want to delete it?"
            ),
        )

    return DeletionCheck(requires_confirmation=False)
