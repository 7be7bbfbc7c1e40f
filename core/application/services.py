"""
应用服务基础设施。
提供应用服务的公共基类和将领域异常转换为失败结果的装饰器。
"""
import functools
from typing import Any, Callable, Optional

from loguru import logger

from core.domain.exceptions import DomainException
from core.domain.results import Result
from core.infrastructure.cache import CacheService, NoCacheService
from core.infrastructure.transaction import TransactionManager


def service_operation(description: str) -> Callable:
    """
    应用服务操作装饰器。

    被装饰的方法返回普通值时包装为成功结果；抛出领域异常时转换为失败结果；
    其他异常记录日志后继续抛出，由统一异常处理器处理。

    Args:
        description: 操作描述，用于日志

    Returns:
        装饰器
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Result:
            try:
                value = func(*args, **kwargs)
            except DomainException as e:
                logger.warning(f"{description}失败: [{e.code}] {e.message}")
                return Result.failure(e.to_error())
            except Exception as e:
                logger.error(f"{description}失败: {e}")
                raise
            if isinstance(value, Result):
                return value
            return Result.success(value)
        return wrapper
    return decorator


class ApplicationService:
    """
    应用服务基类。
    持有事务管理器和缓存服务，提供缓存读取的辅助方法。
    """

    def __init__(
        self,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        """
        初始化应用服务。

        Args:
            transaction_manager: 事务管理器
            cache_service: 缓存服务，未提供时不使用缓存
        """
        self.transaction_manager = transaction_manager
        self.cache_service = cache_service or NoCacheService()

    def _cached(self, key: str, factory: Callable[[], Any], ttl: int) -> Any:
        """
        从缓存读取值，不存在时调用工厂函数并写入缓存。

        Args:
            key: 缓存键
            factory: 生成值的函数，返回None时不缓存
            ttl: 过期时间（秒）

        Returns:
            缓存值或新生成的值
        """
        return self.cache_service.get_or_set(key, factory, ttl)
