"""
发件箱处理器。
读取到期的发件箱消息，还原领域事件并发布给进程内的事件处理器。
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from loguru import logger

from core.domain import DomainEvent, DomainEvents, utc_now
from core.infrastructure.transaction import TransactionManager
from outbox.domain import OutboxMessage, OutboxMessageRepository

BASE_RETRY_DELAY_SECONDS = 30
MAX_RETRY_DELAY_SECONDS = 3600


def retry_delay(retry_count: int) -> timedelta:
    """
    失败后的重试间隔，按重试次数指数增长并有上限。

    Args:
        retry_count: 已失败次数，从1开始

    Returns:
        重试间隔
    """
    seconds = BASE_RETRY_DELAY_SECONDS * 2 ** max(0, retry_count - 1)
    return timedelta(seconds=min(seconds, MAX_RETRY_DELAY_SECONDS))


@dataclass
class ProcessingResult:
    processed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.failed


class OutboxProcessor:
    """
    发件箱处理器。
    每条消息在独立事务中发布，处理器失败时记录错误并按指数退避重新计划。
    """

    def __init__(
        self,
        repository: OutboxMessageRepository,
        transaction_manager: TransactionManager,
        batch_size: int = 50,
        max_retry_attempts: int = 5,
        publish: Optional[Callable[[DomainEvent], None]] = None
    ):
        self.repository = repository
        self.transaction_manager = transaction_manager
        self.batch_size = batch_size
        self.max_retry_attempts = max_retry_attempts
        self.publish = publish or DomainEvents.publish

    @classmethod
    def from_settings(cls, repository: OutboxMessageRepository,
                      transaction_manager: TransactionManager) -> 'OutboxProcessor':
        from django.conf import settings

        options = getattr(settings, "OUTBOX_SETTINGS", {})
        return cls(
            repository,
            transaction_manager,
            batch_size=options.get("BATCH_SIZE", 50),
            max_retry_attempts=options.get("MAX_RETRY_ATTEMPTS", 5),
        )

    def process_pending(self) -> ProcessingResult:
        """
        处理一批到期消息。

        Returns:
            本批成功和失败的数量
        """
        result = ProcessingResult()
        for message in self.repository.get_due(self.batch_size, self.max_retry_attempts):
            if self._process(message):
                result.processed += 1
            else:
                result.failed += 1
        if result.total:
            logger.info(f"发件箱处理完成: 成功={result.processed} 失败={result.failed}")
        return result

    def _process(self, message: OutboxMessage) -> bool:
        try:
            with self.transaction_manager.start():
                self.publish(message.to_event())
                message.mark_as_processed()
                self.repository.save(message)
            return True
        except Exception as e:
            message.mark_as_failed(f"{type(e).__name__}: {e}")
            message.reschedule(retry_delay(message.retry_count))
            self.repository.save(message)
            if message.retry_count >= self.max_retry_attempts:
                logger.error(f"发件箱消息重试次数已达上限: {message.type} {message.id} {message.error}")
            else:
                logger.warning(f"发件箱消息处理失败: {message.type} {message.id} 第{message.retry_count}次 {message.error}")
            return False

    def cleanup(self, days_to_keep: int) -> int:
        """
        删除处理完成超过days_to_keep天的消息。

        Returns:
            删除的消息数量
        """
        cutoff = utc_now() - timedelta(days=days_to_keep)
        deleted = self.repository.delete_processed_before(cutoff)
        if deleted:
            logger.info(f"已清理{deleted}条发件箱消息")
        return deleted
