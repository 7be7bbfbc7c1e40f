"""
基于Django ORM的发件箱仓储实现。
"""
from datetime import datetime
from typing import List

from django.db.models import F

from core.domain import utc_now
from outbox.domain import OutboxMessage, OutboxMessageRepository
from outbox.infrastructure.models import OutboxMessageModel


class DjangoOutboxMessageRepository(OutboxMessageRepository):

    @staticmethod
    def _to_domain(model: OutboxMessageModel) -> OutboxMessage:
        return OutboxMessage(
            id=model.id,
            type=model.type,
            content=model.content,
            processed_at=model.processed_at,
            error=model.error,
            retry_count=model.retry_count,
            scheduled_at=model.scheduled_at,
            created_at=model.created_at,
        )

    def add(self, message: OutboxMessage) -> None:
        OutboxMessageModel.objects.create(
            id=message.id,
            type=message.type,
            content=message.content,
            created_at=message.created_at,
            processed_at=message.processed_at,
            error=message.error,
            retry_count=message.retry_count,
            scheduled_at=message.scheduled_at,
        )

    def save(self, message: OutboxMessage) -> None:
        OutboxMessageModel.objects.filter(pk=message.id).update(
            processed_at=message.processed_at,
            error=message.error,
            retry_count=message.retry_count,
            scheduled_at=message.scheduled_at,
        )

    def get_by_id(self, message_id) -> OutboxMessage:
        model = OutboxMessageModel.objects.filter(pk=message_id).first()
        return self._to_domain(model) if model else None

    def get_due(self, batch_size: int, max_retry_attempts: int) -> List[OutboxMessage]:
        queryset = OutboxMessageModel.objects.filter(
            processed_at__isnull=True,
            retry_count__lt=max_retry_attempts,
            scheduled_at__lte=utc_now(),
        ).order_by(F("created_at").asc(), "id")[:batch_size]
        return [self._to_domain(m) for m in queryset]

    def delete_processed_before(self, cutoff: datetime) -> int:
        deleted, _ = OutboxMessageModel.objects.filter(
            processed_at__isnull=False, processed_at__lt=cutoff
        ).delete()
        return deleted
