"""
事务管理器模块。
应用服务通过事务管理器划定一致性边界，聚合与其发件箱消息在同一事务中写入。
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Generator, List

from django.db import transaction as django_transaction
from loguru import logger


class TransactionManager(ABC):
    """事务管理器接口"""

    @abstractmethod
    @contextmanager
    def start(self) -> Generator[None, None, None]:
        """
        开启事务，作用域正常结束时提交，抛出异常时回滚。

        Yields:
            None
        """
        pass

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """
        注册事务提交后执行的回调。

        Args:
            callback: 无参回调函数
        """
        pass


class DjangoTransactionManager(TransactionManager):
    """基于django.db.transaction.atomic的事务管理器"""

    def __init__(self, using: str = None):
        self.using = using

    @contextmanager
    def start(self) -> Generator[None, None, None]:
        try:
            with django_transaction.atomic(using=self.using):
                yield
        except Exception as e:
            logger.debug(f"事务回滚: {type(e).__name__}: {e}")
            raise

    def on_commit(self, callback: Callable[[], None]) -> None:
        django_transaction.on_commit(callback, using=self.using)


class NoOpTransactionManager(TransactionManager):
    """
    空操作事务管理器。
    用于领域与应用层单元测试，提交回调在作用域正常结束时立即执行。
    """

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []

    @contextmanager
    def start(self) -> Generator[None, None, None]:
        self._callbacks = []
        yield
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_commit(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)
