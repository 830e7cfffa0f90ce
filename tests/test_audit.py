"""Tests for the audit logger and in-memory audit storage."""

import pytest

from securefin.audit import AuditLogger, create_correlation_id
from securefin.models.audit import AuditEventBuilder, AuditEventType
from securefin.services.storage import AuditStorageInterface, InMemoryAuditStorage


class FailingAuditStorage(AuditStorageInterface):

    async def append_event(self, event):
        raise IOError("disk full")

    async def get_events_by_correlation_id(self, correlation_id):
        return []

    async def get_events_by_entity(self, entity_type, entity_id):
        return []

    async def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:

    @pytest.mark.asyncio
    async def test_log_without_storage(self):
        event = AuditEventBuilder.system_error("Boom", "something broke")
        assert await AuditLogger().log(event) is True

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(self):
        logger = AuditLogger(FailingAuditStorage())
        event = AuditEventBuilder.system_error("Boom", "something broke")
        assert await logger.log(event) is False

    @pytest.mark.asyncio
    async def test_events_grouped_by_correlation_id(self, audit_logger, audit_storage):
        cid = create_correlation_id()
        await audit_logger.log_block_appended(
            account_id="9876543210",
            index=1,
            block_hash="ab" * 32,
            transaction_type="income",
            amount="100",
            correlation_id=cid,
        )
        await audit_logger.log_goal_funded(
            goal_id="emergency-fund",
            goal_name="Emergency Fund",
            contribution="5",
            current_amount="5",
            correlation_id=cid,
        )
        await audit_logger.log_error("Other", "unrelated")

        events = await audit_storage.get_events_by_correlation_id(cid)
        assert [e.event_type for e in events] == [
            AuditEventType.BLOCK_APPENDED,
            AuditEventType.GOAL_FUNDED,
        ]

    @pytest.mark.asyncio
    async def test_events_by_entity(self, audit_logger, audit_storage):
        await audit_logger.log_chain_verification_failed("9876543210", broken_index=2)
        await audit_logger.log_chain_verification_failed("9123456780", broken_index=1)

        events = await audit_storage.get_events_by_entity("account", "9876543210")
        assert len(events) == 1
        assert events[0].details["broken_index"] == 2

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        await logger.log_external_service_error("advice", "first")
        await logger.log_external_service_error("advice", "second")

        events = await storage.get_recent_events(limit=1)
        assert len(events) == 1
        assert events[0].error_message == "second"

    def test_correlation_ids_unique(self):
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
