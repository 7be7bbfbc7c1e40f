"""
发件箱消息。
领域事件与业务数据在同一事务中写入发件箱，由后台处理器异步发布。
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from core.domain import DomainEvent, DomainEvents, Entity, ValidationException, utc_now

EVENT_TYPE_PREFIX = "Event:"


class OutboxMessage(Entity):
    """发件箱消息实体"""

    def __init__(
        self,
        id: Any = None,
        type: str = "",
        content: Optional[Dict[str, Any]] = None,
        processed_at: Optional[datetime] = None,
        error: Optional[str] = None,
        retry_count: int = 0,
        scheduled_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at)
        self.type = type
        self.content = content or {}
        self.processed_at = processed_at
        self.error = error
        self.retry_count = retry_count
        self.scheduled_at = scheduled_at or self.created_at

    @classmethod
    def from_event(cls, event: DomainEvent, scheduled_at: Optional[datetime] = None) -> 'OutboxMessage':
        """
        由领域事件创建消息，类型为"Event:{事件类名}"。

        Raises:
            ValidationException: 事件为空
        """
        if event is None:
            raise ValidationException("event", "事件不能为空")
        return cls(type=f"{EVENT_TYPE_PREFIX}{event.event_name}", content=event.to_dict(), scheduled_at=scheduled_at)

    @property
    def is_processed(self) -> bool:
        return self.processed_at is not None

    @property
    def event_name(self) -> Optional[str]:
        if not self.type.startswith(EVENT_TYPE_PREFIX):
            return None
        return self.type[len(EVENT_TYPE_PREFIX):]

    def to_event(self) -> DomainEvent:
        """
        还原领域事件。

        Raises:
            ValidationException: 消息类型不是领域事件
            KeyError: 未知的事件类型
        """
        if self.event_name is None:
            raise ValidationException("type", f"不是领域事件消息: {self.type}")
        return DomainEvents.resolve(self.event_name).from_dict(self.content)

    def mark_as_processed(self) -> None:
        self.processed_at = utc_now()
        self.error = None

    def mark_as_failed(self, error: str) -> None:
        self.error = error
        self.retry_count += 1

    def reschedule(self, delay: timedelta) -> None:
        self.scheduled_at = utc_now() + delay
