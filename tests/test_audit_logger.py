"""Tests for the audit logger."""

import json
import logging

import pytest

from bankcli.audit import AuditLogger, configure_logging, create_correlation_id
from bankcli.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from bankcli.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    JsonLinesAuditStorage,
    StorageError,
)


class BrokenAuditStorage(AuditStorageInterface):
    async def append_event(self, event: AuditEvent) -> bool:
        raise ConnectionError("audit backend down")


class TestAuditLogger:
    """Audit events are logged locally and stored when a backend exists."""

    @pytest.mark.asyncio
    async def test_event_is_stored(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)

        assert await logger.log(AuditEventBuilder.account_deleted("ACC-1000"))
        assert storage.events[0].event_type == AuditEventType.ACCOUNT_DELETED

    @pytest.mark.asyncio
    async def test_without_storage(self):
        assert await AuditLogger().log(AuditEventBuilder.save_skipped())

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(self):
        logger = AuditLogger(BrokenAuditStorage())
        assert await logger.log(AuditEventBuilder.account_deleted("ACC-1000")) is False

    @pytest.mark.asyncio
    async def test_log_error(self):
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()

        await AuditLogger(storage).log_error(
            "SaveError",
            "disk full",
            details={"path": "bank-data.json"},
            correlation_id=correlation_id,
        )

        event = storage.events[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.correlation_id == correlation_id
        assert event.details == {"path": "bank-data.json"}

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()


class TestConfigureLogging:
    """structlog is configured over stdlib logging."""

    def test_sets_root_level(self):
        configure_logging("ERROR", "console")
        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level_falls_back_to_warning(self):
        configure_logging("chatty")
        assert logging.getLogger().level == logging.WARNING


class TestJsonLinesAuditStorage:
    """The audit file gets one JSON object per event, appended."""

    @pytest.mark.asyncio
    async def test_appends_one_line_per_event(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "logs" / "audit.jsonl")
        correlation_id = create_correlation_id()
        logger = AuditLogger(storage)

        await logger.log(AuditEventBuilder.account_opened("ACC-1000", "Alice", "10", correlation_id=correlation_id))
        await logger.log(AuditEventBuilder.account_deleted("ACC-1000"))

        lines = storage.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["event_type"] == "account_opened"
        assert first["account_id"] == "ACC-1000"
        assert first["correlation_id"] == str(correlation_id)
        assert json.loads(lines[1])["event_type"] == "account_deleted"

    @pytest.mark.asyncio
    async def test_existing_lines_are_kept(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        path.write_text('{"event_type": "earlier"}\n', encoding="utf-8")

        await JsonLinesAuditStorage(path).append_event(AuditEventBuilder.save_skipped())

        lines = path.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[0]) == {"event_type": "earlier"}
        assert json.loads(lines[1])["event_type"] == "save_skipped"

    @pytest.mark.asyncio
    async def test_unwritable_path_raises_storage_error(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path, retry_attempts=1)

        with pytest.raises(StorageError):
            await storage.append_event(AuditEventBuilder.save_skipped())
