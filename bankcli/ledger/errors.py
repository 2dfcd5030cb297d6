"""
Ledger Engine Exceptions

Rejected user input is never raised; it comes back as a result model.
These exceptions are for programming faults inside the engine, such as
adding an account whose id is already taken.
"""


class LedgerError(Exception):
    """Base exception for ledger engine faults."""
    pass


class DuplicateAccountError(LedgerError):
    """An account with this id is already in the store."""
    pass


class AccountNotFoundError(LedgerError):
    """No account with this id is in the store."""
    pass
