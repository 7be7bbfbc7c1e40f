"""
聚合根模块。
包含AggregateRoot基类，用于定义领域聚合的边界和不变性规则。
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.domain.base import Entity
from core.domain.events import DomainEvent


class AggregateRoot(Entity):
    """
    聚合根基类。
    聚合根是一个特殊的实体，它定义了一个聚合的边界，
    并负责维护聚合内部对象的不变性规则。
    它是外部访问聚合内部对象的唯一入口点。
    """

    def __init__(
        self,
        id: Any = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        """
        初始化聚合根。

        Args:
            id: 聚合根标识，如果未提供，将自动生成UUID
            version: 已持久化的版本号，新建聚合为0
            created_at: 创建时间
            updated_at: 更新时间
        """
        super().__init__(id, created_at, updated_at)
        self._domain_events: List[DomainEvent] = []
        self._version: int = version
        self.metadata: Dict[str, Any] = {}

    @property
    def version(self) -> int:
        """
        获取聚合根已持久化的版本号，用于乐观锁。

        Returns:
            聚合根的版本号
        """
        return self._version

    def mark_persisted(self, version: int) -> None:
        """
        记录持久化后的版本号，由仓储在保存成功后调用。

        Args:
            version: 数据库中的新版本号
        """
        self._version = version

    @property
    def domain_events(self) -> List[DomainEvent]:
        """获取尚未发布的领域事件副本"""
        return list(self._domain_events)

    def add_domain_event(self, event: DomainEvent) -> None:
        """
        添加领域事件到事件列表中，等待发布。

        Args:
            event: 要添加的领域事件
        """
        self._domain_events.append(event)
        self.touch()

    def clear_domain_events(self) -> List[DomainEvent]:
        """
        清除并返回所有未发布的领域事件。

        Returns:
            未发布的领域事件列表
        """
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def update_metadata(self, key: str, value: Any) -> None:
        """
        设置元数据项。

        Args:
            key: 元数据键
            value: 元数据值，需可JSON序列化
        """
        self.metadata[key] = value
        self.touch()
