"""
JSON File Storage Implementation

DESIGN DECISION: The ledger is stored as one small JSON document because:
1. Users can open and read their data in any editor
2. No database setup required
3. A personal ledger never grows large enough to need one

TRADEOFFS:
- The whole document is rewritten on every save
- No crash consistency (a torn write reads as corrupted and starts empty)
- No concurrent writers (the engine guards against overlapping saves)

The implementation follows the abstract interface, so we can swap
to SQLite later without changing business logic.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from bankcli.config import get_settings
from bankcli.models.account import Account, LedgerDocument, LoadResult, Transaction
from bankcli.services.storage.interface import (
    CorruptedDataError,
    LedgerStorageInterface,
    StorageError,
)


CORRUPTED_WARNING = "Warning: Data file corrupted. Starting with empty data."


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    JSON file implementation of ledger storage.

    Document shape:
        {"accounts": [{"id", "holderName", "balance", "createdAt",
                       "transactions": [{"type", "amount", "timestamp",
                                         "balanceAfter", "description"}]}]}
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        indent: Optional[int] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.resolved_data_path
        self._indent = settings.indent if indent is None else indent
        self._retry_attempts = retry_attempts or settings.save_retry_attempts
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _parse_document(self, raw: str) -> tuple[list[Account], list[str]]:
        """
        Parse a document into accounts.

        A document that is not `{"accounts": [...]}` is corrupted as a whole.
        Inside a well-formed document, only entries without an account id
        are skipped. An entry with an id is always kept, damaged if need be,
        so the next save writes it back instead of dropping it.
        """
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptedDataError(f"Ledger document is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("accounts"), list):
            raise CorruptedDataError("Ledger document is not shaped as {accounts: [...]}")

        accounts: list[Account] = []
        warnings: list[str] = []
        seen_ids: set[str] = set()

        for index, entry in enumerate(data["accounts"]):
            account_id = entry.get("id") if isinstance(entry, dict) else None
            if not isinstance(account_id, str) or not account_id.strip():
                self._logger.warning("malformed_account_skipped", index=index)
                warnings.append(f"Skipped malformed account entry #{index + 1}.")
                continue

            try:
                account = Account.model_validate(entry)
            except ValidationError as e:
                self._logger.warning(
                    "damaged_account_salvaged",
                    account_id=account_id,
                    error_count=e.error_count(),
                )
                warnings.append(f"Account {account_id} has unreadable fields; they were reset.")
                account = self._salvage(entry)

            if account.id in seen_ids:
                warnings.append(f"Skipped duplicate account id {account.id}.")
                continue

            seen_ids.add(account.id)
            accounts.append(account)

        return accounts, warnings

    def _salvage(self, entry: dict) -> Account:
        """Keep the readable parts of an account entry that failed validation."""
        raw_transactions = entry.get("transactions")
        transactions = []
        for item in raw_transactions if isinstance(raw_transactions, list) else []:
            try:
                transactions.append(Transaction.model_validate(item))
            except ValidationError:
                continue

        fields = {
            "id": entry["id"],
            "holderName": entry.get("holderName"),
            "balance": entry.get("balance"),
            "transactions": transactions,
        }
        try:
            return Account.model_validate({**fields, "createdAt": entry.get("createdAt")})
        except ValidationError:
            return Account.model_validate(fields)

    async def load(self) -> LoadResult:
        """Load the ledger, creating an empty document if none exists."""
        if not self._path.exists():
            result = LoadResult(created=True)
            try:
                await self.save(LedgerDocument())
            except StorageError as e:
                self._logger.error("initial_save_failed", path=str(self._path), error=str(e))
                result.warnings.append("Failed to save data.")
            return result

        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
            accounts, warnings = self._parse_document(raw)
        except (OSError, ValueError, CorruptedDataError) as e:
            self._logger.warning("ledger_corrupted", path=str(self._path), error=str(e))
            return LoadResult(corrupted=True, warnings=[CORRUPTED_WARNING])

        self._logger.info("ledger_loaded", path=str(self._path), account_count=len(accounts))
        return LoadResult(accounts=accounts, warnings=warnings)

    def _write(self, payload: str) -> None:
        """Blocking write, retried on transient OS errors."""
        for attempt in Retrying(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            reraise=True,
        ):
            with attempt:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(payload, encoding="utf-8")

    async def save(self, document: LedgerDocument) -> bool:
        """Overwrite the JSON file with the whole ledger."""
        payload = json.dumps(document.to_document(), indent=self._indent)
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            raise StorageError(f"Failed to save ledger to {self._path}: {e}") from e
        return True
