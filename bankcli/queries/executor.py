"""
Ledger Query Engine

DESIGN DECISION: Reads never mutate and never raise for bad input.
Each query returns either a payload or a rejection reason string,
the same shape the ledger operations use.

Listing goes through the integrity sweep: accounts damaged in storage
are left in the store but never shown or added to totals.
"""

from typing import TYPE_CHECKING, Optional

from bankcli.models.account import AccountListing, QueryResult
from bankcli.validation import filter_invalid_accounts, validate_account_exists

if TYPE_CHECKING:
    from bankcli.ledger.store import AccountStore


class QueryExecutor:
    """
    Executes read-only queries against an AccountStore.

    GUARANTEES:
    - Only returns real data from the store
    - Clear "Account not found." if nothing matches
    """

    def __init__(self, store: "AccountStore"):
        self._store = store

    def list_accounts(self) -> AccountListing:
        """All displayable accounts, in creation order, plus totals."""
        return filter_invalid_accounts(self._store.all())

    def get_account(self, account_id: Optional[str]) -> QueryResult:
        """Look up one account by id."""
        found = validate_account_exists(account_id, self._store)
        if not found.valid:
            return QueryResult(success=False, error_message=found.error, reason=found.reason)

        return QueryResult(success=True, account=found.account)

    def get_transaction_history(self, account_id: Optional[str]) -> QueryResult:
        """An account's transactions, oldest first."""
        found = validate_account_exists(account_id, self._store)
        if not found.valid:
            return QueryResult(success=False, error_message=found.error, reason=found.reason)

        return QueryResult(
            success=True,
            account=found.account,
            transactions=list(found.account.transactions),
        )
