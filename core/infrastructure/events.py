"""
领域事件分发模块。
仓储在保存聚合后把其中的领域事件交给分发器处理。
"""
from abc import ABC, abstractmethod
from typing import Iterable

from django.utils.module_loading import import_string
from loguru import logger

from core.domain.events import DomainEvent, DomainEvents


class DomainEventDispatcher(ABC):
    """领域事件分发器接口"""

    @abstractmethod
    def dispatch(self, events: Iterable[DomainEvent]) -> None:
        """
        分发领域事件。

        Args:
            events: 待分发的领域事件
        """
        pass


class ImmediateDomainEventDispatcher(DomainEventDispatcher):
    """立即在当前进程内发布事件的分发器，用于测试和脚本"""

    def dispatch(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            logger.debug(f"发布领域事件: {event.event_name}")
            DomainEvents.publish(event)


def create_event_dispatcher() -> DomainEventDispatcher:
    """
    根据settings.DOMAIN_EVENTS['DISPATCHER']创建分发器。
    默认使用发件箱分发器，事件在当前事务中写入发件箱表。
    """
    from django.conf import settings

    options = getattr(settings, "DOMAIN_EVENTS", {})
    path = options.get("DISPATCHER", "outbox.infrastructure.dispatcher.OutboxDomainEventDispatcher")
    return import_string(path)()
