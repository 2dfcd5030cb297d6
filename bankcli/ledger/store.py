"""
Account Store

The in-memory collection of accounts, keyed by id. One store is owned
by one LedgerService; there is no module-level ledger state, so tests
build as many isolated stores as they like.
"""

import random
from typing import Iterable, Iterator, Optional

from bankcli.config import get_settings
from bankcli.models.account import Account, LedgerDocument
from bankcli.ledger.errors import AccountNotFoundError, DuplicateAccountError


class AccountStore:
    """
    Accounts keyed by id, in insertion order.

    Args:
        accounts: Accounts to start with (e.g. freshly loaded)
        id_prefix / id_min / id_max: Account id format, default from settings
        rng: Random source for id generation; inject a seeded one in tests
    """

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        id_prefix: Optional[str] = None,
        id_min: Optional[int] = None,
        id_max: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings().ledger
        self._accounts: dict[str, Account] = {}
        self._id_prefix = id_prefix if id_prefix is not None else settings.account_id_prefix
        self._id_min = id_min if id_min is not None else settings.account_id_min
        self._id_max = id_max if id_max is not None else settings.account_id_max
        self._rng = rng or random.Random()

        for account in accounts or []:
            self.add(account)

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(list(self._accounts.values()))

    def __contains__(self, account_id: object) -> bool:
        return isinstance(account_id, str) and self.exists(account_id)

    def generate_id(self) -> str:
        """
        Mint an id not used by any account currently in the store.

        Draws from the whole id range until a free one turns up. The loop
        has no attempt cap: with every id in the range taken it never returns.
        """
        while True:
            account_id = f"{self._id_prefix}{self._rng.randint(self._id_min, self._id_max)}"
            if account_id not in self._accounts:
                return account_id

    def find_by_id(self, account_id: Optional[str]) -> Optional[Account]:
        """Exact match on the trimmed id."""
        return self._accounts.get((account_id or "").strip())

    def exists(self, account_id: Optional[str]) -> bool:
        return self.find_by_id(account_id) is not None

    def add(self, account: Account) -> None:
        if account.id in self._accounts:
            raise DuplicateAccountError(f"Account id already in use: {account.id}")
        self._accounts[account.id] = account

    def remove(self, account_id: str) -> Account:
        """
        Remove an account together with its history.

        Only call after validate_account_deletion has cleared it.
        """
        account = self.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account not found: {account_id}")
        return self._accounts.pop(account.id)

    def all(self) -> list[Account]:
        return list(self._accounts.values())

    def to_document(self) -> LedgerDocument:
        """Snapshot of the current state, detached from the live accounts."""
        return LedgerDocument(
            accounts=[account.model_copy(deep=True) for account in self._accounts.values()]
        )
