"""
发件箱事件分发器。
"""
from typing import Iterable, Optional

from loguru import logger

from core.domain import DomainEvent
from core.infrastructure.events import DomainEventDispatcher
from outbox.domain import OutboxMessage, OutboxMessageRepository


class OutboxDomainEventDispatcher(DomainEventDispatcher):
    """
    把领域事件写入发件箱表。
    仓储在业务事务内调用，事件与聚合的修改一起提交或回滚。
    """

    def __init__(self, repository: Optional[OutboxMessageRepository] = None):
        if repository is None:
            from outbox.infrastructure.repositories import DjangoOutboxMessageRepository
            repository = DjangoOutboxMessageRepository()
        self.repository = repository

    def dispatch(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            message = OutboxMessage.from_event(event)
            self.repository.add(message)
            logger.debug(f"事件已写入发件箱: {message.type} {message.id}")
