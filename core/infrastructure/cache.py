"""
缓存服务模块。
提供缓存服务接口，以及Redis、内存和空缓存三种实现。
"""
from abc import ABC, abstractmethod
import fnmatch
import pickle
import threading
import time
from typing import Any, Callable, NamedTuple, Optional, Sequence

from cachetools import TLRUCache, TTLCache
from loguru import logger
import redis


class CacheService(ABC):
    """
    缓存服务接口。
    键使用冒号分隔的命名空间，例如 product:{id}、products:*。
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        从缓存中获取值。

        Args:
            key: 缓存键

        Returns:
            缓存值，不存在或已过期时返回None
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """
        将值存入缓存。

        Args:
            key: 缓存键
            value: 要缓存的值
            ttl: 过期时间（秒）

        Returns:
            是否成功
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """
        删除匹配通配符模式的所有键。

        Args:
            pattern: 键模式，支持 * 通配符

        Returns:
            删除的键数量
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> int:
        """
        清空本服务管理的全部缓存。

        Returns:
            删除的键数量
        """
        pass

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: int = 300) -> Any:
        """
        读取缓存，未命中时调用工厂函数生成并写入。

        Args:
            key: 缓存键
            factory: 无参工厂函数，返回None时不写入缓存
            ttl: 过期时间（秒）

        Returns:
            缓存值或新生成的值
        """
        value = self.get(key)
        if value is not None:
            return value
        value = factory()
        if value is not None:
            self.set(key, value, ttl)
        return value


# 这些键对一致性敏感，跨进程失效后不能再由本地层返回旧值
DEFAULT_LOCAL_CACHE_EXCLUDE = ("product:*", "products:*", "search:*", "order:*", "orders:*", "cart:*")


class RedisCacheService(CacheService):
    """
    基于Redis的缓存服务。
    在Redis之上叠加一层短时本地缓存以减少热点键的网络往返。
    本地层只在当前进程内失效，匹配local_cache_exclude的键始终直接读Redis。
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "shopilent:",
        local_cache_size: int = 1000,
        local_cache_ttl: int = 5,
        local_cache_exclude: Sequence[str] = DEFAULT_LOCAL_CACHE_EXCLUDE
    ):
        """
        初始化Redis缓存服务。

        Args:
            redis_client: Redis客户端
            key_prefix: 键前缀
            local_cache_size: 本地缓存大小，为0时不使用本地缓存
            local_cache_ttl: 本地缓存TTL（秒）
            local_cache_exclude: 不进入本地缓存的键模式
        """
        self.redis_client = redis_client
        self.key_prefix = key_prefix
        self.local_cache = TTLCache(maxsize=local_cache_size, ttl=local_cache_ttl) if local_cache_size else None
        self.local_cache_exclude = tuple(local_cache_exclude)
        self._lock = threading.RLock()

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _is_local(self, key: str) -> bool:
        if self.local_cache is None:
            return False
        return not any(fnmatch.fnmatchcase(key, pattern) for pattern in self.local_cache_exclude)

    def _local_get(self, key: str) -> Optional[Any]:
        if not self._is_local(key):
            return None
        with self._lock:
            return self.local_cache.get(key)

    def _local_set(self, key: str, value: Any) -> None:
        if self._is_local(key):
            with self._lock:
                self.local_cache[key] = value

    def _local_delete(self, pattern: str) -> None:
        if self.local_cache is None:
            return
        with self._lock:
            for k in [k for k in list(self.local_cache.keys()) if fnmatch.fnmatchcase(k, pattern)]:
                self.local_cache.pop(k, None)

    def get(self, key: str) -> Optional[Any]:
        value = self._local_get(key)
        if value is not None:
            return value

        try:
            raw = self.redis_client.get(self._full_key(key))
        except redis.RedisError as e:
            logger.error(f"Redis缓存读取错误: {e}")
            return None
        if raw is None:
            return None

        try:
            value = pickle.loads(raw)
        except (pickle.PickleError, EOFError, AttributeError) as e:
            logger.warning(f"缓存值无法反序列化，已丢弃: {key}: {e}")
            self.delete(key)
            return None
        self._local_set(key, value)
        return value

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        try:
            serialized = pickle.dumps(value)
            result = self.redis_client.set(self._full_key(key), serialized, ex=max(1, int(ttl)))
        except (redis.RedisError, pickle.PickleError, TypeError) as e:
            logger.error(f"Redis缓存写入错误: {key}: {e}")
            return False
        self._local_set(key, value)
        return bool(result)

    def delete(self, key: str) -> bool:
        self._local_delete(key)
        try:
            return self.redis_client.delete(self._full_key(key)) > 0
        except redis.RedisError as e:
            logger.error(f"Redis缓存删除错误: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        self._local_delete(pattern)
        count = 0
        try:
            batch = []
            for full_key in self.redis_client.scan_iter(match=self._full_key(pattern), count=500):
                batch.append(full_key)
                if len(batch) >= 500:
                    count += self.redis_client.delete(*batch)
                    batch = []
            if batch:
                count += self.redis_client.delete(*batch)
        except redis.RedisError as e:
            logger.error(f"Redis缓存模式删除错误: {pattern}: {e}")
        logger.debug(f"已删除匹配 {pattern} 的 {count} 个键")
        return count

    def exists(self, key: str) -> bool:
        if self._local_get(key) is not None:
            return True
        try:
            return bool(self.redis_client.exists(self._full_key(key)))
        except redis.RedisError as e:
            logger.error(f"Redis缓存检查错误: {e}")
            return False

    def clear(self) -> int:
        if self.local_cache is not None:
            with self._lock:
                self.local_cache.clear()
        return self.delete_pattern("*")


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCacheService(CacheService):
    """
    进程内缓存服务。
    基于cachetools.TLRUCache，每个键单独记录过期时间，适用于开发环境和测试。
    """

    def __init__(self, maxsize: int = 1000, default_ttl: int = 300, timer: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._cache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=timer)
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = _Entry(value, ttl)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def delete_pattern(self, pattern: str) -> int:
        with self._lock:
            self._cache.expire()
            keys = [k for k in list(self._cache.keys()) if fnmatch.fnmatchcase(k, pattern)]
            for key in keys:
                self._cache.pop(key, None)
        return len(keys)

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> int:
        with self._lock:
            self._cache.expire()
            count = len(self._cache)
            self._cache.clear()
        return count


class NoCacheService(CacheService):
    """空缓存服务，用于禁用缓存的场景"""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        return True

    def delete(self, key: str) -> bool:
        return False

    def delete_pattern(self, pattern: str) -> int:
        return 0

    def exists(self, key: str) -> bool:
        return False

    def clear(self) -> int:
        return 0


_memory_cache: Optional[MemoryCacheService] = None


def create_cache_service() -> CacheService:
    """
    根据配置创建缓存服务。

    读取 settings.CACHE_SETTINGS['BACKEND']，取值为 redis、memory 或 none。
    内存缓存在进程内共享同一个实例。

    Returns:
        缓存服务实例
    """
    global _memory_cache
    from django.conf import settings

    options = getattr(settings, "CACHE_SETTINGS", {})
    backend = str(options.get("BACKEND", "memory")).lower()

    if backend == "redis":
        from django_redis import get_redis_connection
        return RedisCacheService(
            get_redis_connection("default"),
            key_prefix=options.get("KEY_PREFIX", "shopilent:"),
            local_cache_size=options.get("LOCAL_CACHE_SIZE", 1000),
            local_cache_ttl=options.get("LOCAL_CACHE_TTL", 5),
            local_cache_exclude=options.get("LOCAL_CACHE_EXCLUDE", DEFAULT_LOCAL_CACHE_EXCLUDE),
        )
    if backend == "memory":
        if _memory_cache is None:
            _memory_cache = MemoryCacheService(
                maxsize=options.get("MAX_SIZE", 1000),
                default_ttl=options.get("DEFAULT_TTL", 300),
            )
        return _memory_cache
    return NoCacheService()
