"""Tests for background save coordination."""

import asyncio
from decimal import Decimal

import pytest

from bankcli.audit import AuditLogger
from bankcli.ledger import AccountStore, LedgerService, SaveCoordinator
from bankcli.models.account import LedgerDocument
from bankcli.models.audit import AuditEventType
from bankcli.services.storage import InMemoryLedgerStorage, LedgerStorageInterface

from conftest import make_account


class ExplodingStorage(LedgerStorageInterface):
    """Storage whose save fails with something other than StorageError."""

    async def load(self):
        raise NotImplementedError

    async def save(self, document: LedgerDocument) -> bool:
        raise RuntimeError("boom")


class TestSaveCoordinator:
    """At most one save in flight; overlapping requests are dropped."""

    @pytest.mark.asyncio
    async def test_save_runs_in_background(self):
        storage = InMemoryLedgerStorage(save_delay=0.01)
        saver = SaveCoordinator(storage, LedgerDocument)

        assert await saver.request_save()
        assert saver.in_flight
        assert storage.saved_documents == []

        await saver.wait_idle()

        assert not saver.in_flight
        assert storage.saved_documents == [{"accounts": []}]
        assert saver.completed_saves == 1

    @pytest.mark.asyncio
    async def test_overlapping_request_is_dropped(self, audit_storage):
        storage = InMemoryLedgerStorage(save_delay=0.01)
        saver = SaveCoordinator(storage, LedgerDocument, AuditLogger(audit_storage))

        assert await saver.request_save()
        assert not await saver.request_save()
        await saver.wait_idle()

        assert len(storage.saved_documents) == 1
        assert saver.skipped_saves == 1
        assert AuditEventType.SAVE_SKIPPED in [e.event_type for e in audit_storage.events]

    @pytest.mark.asyncio
    async def test_new_request_after_completion(self):
        storage = InMemoryLedgerStorage()
        saver = SaveCoordinator(storage, LedgerDocument)

        await saver.request_save()
        await saver.wait_idle()
        assert await saver.request_save()
        await saver.wait_idle()

        assert len(storage.saved_documents) == 2

    @pytest.mark.asyncio
    async def test_snapshot_taken_at_request_time(self):
        store = AccountStore([make_account("ACC-1000", "Alice", "10")])
        storage = InMemoryLedgerStorage(save_delay=0.01)
        saver = SaveCoordinator(storage, store.to_document)

        await saver.request_save()
        store.find_by_id("ACC-1000").balance = Decimal("999")
        await saver.wait_idle()

        assert storage.last_saved["accounts"][0]["balance"] == 10

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, audit_storage):
        storage = InMemoryLedgerStorage(fail_saves=True)
        saver = SaveCoordinator(storage, LedgerDocument, AuditLogger(audit_storage))

        await saver.request_save()
        await saver.wait_idle()

        assert saver.failed_saves == 1
        assert saver.last_error == "Simulated save failure"
        assert not saver.in_flight
        assert AuditEventType.SAVE_FAILED in [e.event_type for e in audit_storage.events]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self):
        saver = SaveCoordinator(ExplodingStorage(), LedgerDocument)

        await saver.request_save()
        await saver.wait_idle()

        assert saver.last_error == "RuntimeError: boom"
        assert not saver.in_flight

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_system_error_event(self, audit_storage):
        saver = SaveCoordinator(ExplodingStorage(), LedgerDocument, AuditLogger(audit_storage))

        await saver.request_save()
        await saver.wait_idle()

        types = [e.event_type for e in audit_storage.events]
        assert types == [AuditEventType.SAVE_FAILED, AuditEventType.SYSTEM_ERROR]
        system_error = audit_storage.events[-1]
        assert system_error.description == "System error: RuntimeError"
        assert system_error.error_message == "boom"
        assert system_error.details["operation"] == "save"

    @pytest.mark.asyncio
    async def test_storage_error_is_not_a_system_error(self, audit_storage):
        saver = SaveCoordinator(InMemoryLedgerStorage(fail_saves=True), LedgerDocument, AuditLogger(audit_storage))

        await saver.request_save()
        await saver.wait_idle()

        assert AuditEventType.SYSTEM_ERROR not in [e.event_type for e in audit_storage.events]

    @pytest.mark.asyncio
    async def test_success_clears_last_error(self):
        storage = InMemoryLedgerStorage(fail_saves=True)
        saver = SaveCoordinator(storage, LedgerDocument)

        await saver.request_save()
        await saver.wait_idle()
        storage.fail_saves = False
        await saver.request_save()
        await saver.wait_idle()

        assert saver.last_error is None

    @pytest.mark.asyncio
    async def test_flush_waits_and_writes_latest(self):
        store = AccountStore([make_account("ACC-1000", "Alice", "10")])
        storage = InMemoryLedgerStorage(save_delay=0.01)
        saver = SaveCoordinator(storage, store.to_document)

        await saver.request_save()
        store.find_by_id("ACC-1000").balance = Decimal("20")

        assert await saver.flush()
        assert [doc["accounts"][0]["balance"] for doc in storage.saved_documents] == [10, 20]

    @pytest.mark.asyncio
    async def test_flush_reports_failure(self):
        saver = SaveCoordinator(InMemoryLedgerStorage(fail_saves=True), LedgerDocument)
        assert not await saver.flush()


class TestSaveFailureInService:
    """A failed save never rolls back an applied operation."""

    @pytest.mark.asyncio
    async def test_operation_stands_after_failed_save(self):
        storage = InMemoryLedgerStorage(fail_saves=True)
        service = LedgerService(AccountStore(), storage)

        result = await service.open_account("Alice", "100")
        await service.saver.wait_idle()

        assert result.success
        assert result.account.id in service.store
        assert service.saver.last_error is not None

    @pytest.mark.asyncio
    async def test_rapid_operations_drop_intermediate_saves(self):
        storage = InMemoryLedgerStorage(save_delay=0.05)
        service = LedgerService(AccountStore(), storage)

        opened = await service.open_account("Alice", "100")
        await service.deposit(opened.account.id, "1")
        await service.deposit(opened.account.id, "1")
        await asyncio.sleep(0)

        assert service.saver.skipped_saves == 2
        await service.saver.wait_idle()
        assert storage.last_saved["accounts"][0]["balance"] == 100

        assert await service.shutdown()
        assert storage.last_saved["accounts"][0]["balance"] == 102
