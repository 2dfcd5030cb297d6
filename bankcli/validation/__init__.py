"""Input validation package."""

from bankcli.validation.validator import (
    filter_invalid_accounts,
    is_account_intact,
    validate_account_deletion,
    validate_account_exists,
    validate_account_intact,
    validate_amount,
    validate_duplicate_name,
    validate_holder_name,
    validate_transfer_destination,
    validate_transfer_source,
)

__all__ = [
    "filter_invalid_accounts",
    "is_account_intact",
    "validate_account_deletion",
    "validate_account_exists",
    "validate_account_intact",
    "validate_amount",
    "validate_duplicate_name",
    "validate_holder_name",
    "validate_transfer_destination",
    "validate_transfer_source",
]
