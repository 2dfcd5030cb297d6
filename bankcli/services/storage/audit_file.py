"""
JSON Lines Audit Storage

One audit event per line, appended. The file is never rewritten, which
keeps the audit trail append-only on disk as well as in memory.
"""

import asyncio
from pathlib import Path

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from bankcli.models.audit import AuditEvent
from bankcli.services.storage.interface import AuditStorageInterface, StorageError


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Audit trail written to a `.jsonl` file.

    Args:
        path: File to append to; created with its parent directories
        retry_attempts: How many times a failed append is attempted
    """

    def __init__(self, path: Path, retry_attempts: int = 3):
        self._path = Path(path).expanduser().resolve()
        self._retry_attempts = retry_attempts
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, line: str) -> None:
        for attempt in Retrying(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            reraise=True,
        ):
            with attempt:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(line)

    async def append_event(self, event: AuditEvent) -> bool:
        line = event.model_dump_json() + "\n"
        try:
            await asyncio.to_thread(self._append, line)
        except OSError as e:
            raise StorageError(f"Failed to append audit event to {self._path}: {e}") from e
        return True
