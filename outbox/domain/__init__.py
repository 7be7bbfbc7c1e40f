"""
发件箱领域模型。
"""
from outbox.domain.outbox_message import EVENT_TYPE_PREFIX, OutboxMessage
from outbox.domain.repositories import OutboxMessageRepository

__all__ = ['EVENT_TYPE_PREFIX', 'OutboxMessage', 'OutboxMessageRepository']
