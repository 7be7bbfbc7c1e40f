"""
发件箱测试：事件写入、发布、失败重试和清理。
"""
from datetime import timedelta
from io import StringIO

from django.core.management import call_command
import pytest

from core.domain import DomainEvent, ValidationException, utc_now
from core.infrastructure.transaction import DjangoTransactionManager
from outbox.application import OutboxProcessor, retry_delay
from outbox.domain import OutboxMessage
from outbox.infrastructure.dispatcher import OutboxDomainEventDispatcher
from outbox.infrastructure.models import OutboxMessageModel
from outbox.infrastructure.repositories import DjangoOutboxMessageRepository


class StockCountedEvent(DomainEvent):

    def __init__(self, warehouse, counted):
        super().__init__()
        self.warehouse = warehouse
        self.counted = counted


@pytest.fixture
def repository(db):
    return DjangoOutboxMessageRepository()


def make_processor(repository, publish, max_retry_attempts=5):
    return OutboxProcessor(
        repository, DjangoTransactionManager(), batch_size=10,
        max_retry_attempts=max_retry_attempts, publish=publish,
    )


class TestOutboxMessage:

    def test_from_event_and_back(self):
        message = OutboxMessage.from_event(StockCountedEvent("north", 12))

        assert message.type == "Event:StockCountedEvent"
        assert message.event_name == "StockCountedEvent"
        restored = message.to_event()
        assert isinstance(restored, StockCountedEvent)
        assert (restored.warehouse, restored.counted) == ("north", 12)

    def test_non_event_message(self):
        message = OutboxMessage(type="Command:Rebuild")
        assert message.event_name is None
        with pytest.raises(ValidationException):
            message.to_event()

    def test_retry_delay_grows_and_is_capped(self):
        assert [retry_delay(n).total_seconds() for n in (1, 2, 3)] == [30, 60, 120]
        assert retry_delay(20) == timedelta(hours=1)


@pytest.mark.django_db
class TestOutboxProcessing:

    def test_dispatcher_writes_messages(self, repository):
        events = [StockCountedEvent("north", 1), StockCountedEvent("south", 2)]
        OutboxDomainEventDispatcher(repository).dispatch(events)
        assert OutboxMessageModel.objects.filter(processed_at__isnull=True).count() == 2

    def test_pending_messages_are_published_once(self, repository):
        OutboxDomainEventDispatcher(repository).dispatch([StockCountedEvent("north", 1)])
        published = []
        processor = make_processor(repository, published.append)

        first = processor.process_pending()
        second = processor.process_pending()

        assert (first.processed, first.failed) == (1, 0)
        assert second.total == 0
        assert [e.warehouse for e in published] == ["north"]

    def test_failed_message_is_rescheduled(self, repository):
        event = StockCountedEvent("north", 1)
        OutboxDomainEventDispatcher(repository).dispatch([event])

        def broken(_):
            raise RuntimeError("handler down")

        result = make_processor(repository, broken).process_pending()

        assert result.failed == 1
        message = repository.get_by_id(OutboxMessageModel.objects.get().id)
        assert message.retry_count == 1
        assert message.error == "RuntimeError: handler down"
        assert message.scheduled_at > utc_now() + timedelta(seconds=20)
        assert repository.get_due(10, 5) == []

    def test_exhausted_messages_are_skipped(self, repository):
        message = OutboxMessage.from_event(StockCountedEvent("north", 1))
        message.retry_count = 3
        repository.add(message)

        assert repository.get_due(10, 3) == []
        assert len(repository.get_due(10, 4)) == 1

    def test_cleanup_removes_old_processed_messages(self, repository):
        old = OutboxMessage.from_event(StockCountedEvent("north", 1))
        old.processed_at = utc_now() - timedelta(days=10)
        recent = OutboxMessage.from_event(StockCountedEvent("south", 1))
        recent.mark_as_processed()
        pending = OutboxMessage.from_event(StockCountedEvent("east", 1))
        for message in (old, recent, pending):
            repository.add(message)

        assert make_processor(repository, lambda e: None).cleanup(7) == 1
        assert OutboxMessageModel.objects.count() == 2

    def test_management_command_once(self, repository):
        OutboxDomainEventDispatcher(repository).dispatch([StockCountedEvent("north", 1)])
        out = StringIO()

        call_command("process_outbox", "--once", stdout=out)

        assert "成功1条" in out.getvalue()
        assert OutboxMessageModel.objects.filter(processed_at__isnull=True).count() == 0
