"""
发件箱仓储接口。
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from outbox.domain.outbox_message import OutboxMessage


class OutboxMessageRepository(ABC):

    @abstractmethod
    def add(self, message: OutboxMessage) -> None:
        pass

    @abstractmethod
    def save(self, message: OutboxMessage) -> None:
        pass

    @abstractmethod
    def get_due(self, batch_size: int, max_retry_attempts: int) -> List[OutboxMessage]:
        """
        获取待处理的消息：未处理、重试次数未达上限且已到计划时间，按创建时间排序。
        """
        pass

    @abstractmethod
    def delete_processed_before(self, cutoff: datetime) -> int:
        """删除在cutoff之前处理完成的消息，返回删除数量"""
        pass
