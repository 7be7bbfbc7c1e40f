"""
领域事件模块。
包含DomainEvent基类和DomainEvents管理器，用于领域事件的发布、订阅以及序列化。
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Type
import uuid

from core.domain.base import utc_now


def to_primitive(value: Any) -> Any:
    """
    将值转换为可JSON序列化的基本类型。

    Args:
        value: 任意值

    Returns:
        转换后的值
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_primitive(v) for v in value]
    return value


class DomainEvent:
    """
    领域事件基类。
    领域事件表示领域模型中发生的重要事件，通常用于跨聚合的业务流程。
    子类通过entity_type和entity_id_field声明事件所属的实体，供审计日志使用。
    """

    # 事件类注册表，键为事件类名
    _registry: Dict[str, Type['DomainEvent']] = {}

    entity_type: Optional[str] = None
    entity_id_field: Optional[str] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        DomainEvent._registry[cls.__name__] = cls

    def __init__(self):
        """
        初始化领域事件。
        自动设置事件ID和发生时间。
        """
        self.id = uuid.uuid4()
        self.occurred_on = utc_now()

    @property
    def event_name(self) -> str:
        return type(self).__name__

    @property
    def entity_id(self) -> Any:
        if not self.entity_id_field:
            return None
        return getattr(self, self.entity_id_field, None)

    def to_dict(self) -> Dict[str, Any]:
        """
        将事件转换为可JSON序列化的字典。

        Returns:
            事件属性字典
        """
        return {key: to_primitive(value) for key, value in self.__dict__.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DomainEvent':
        """
        从字典恢复事件。
        恢复后的属性值为JSON基本类型，例如ID为字符串。

        Args:
            data: to_dict()产生的字典

        Returns:
            恢复的事件实例
        """
        event = cls.__new__(cls)
        event.__dict__.update(data)
        return event

    def __repr__(self) -> str:
        return f"{self.event_name}(id={self.id})"


# 事件处理器类型
EventHandler = Callable[[DomainEvent], None]


class DomainEvents:
    """
    领域事件管理器。
    负责事件的发布和订阅。订阅基类的处理器也会收到子类事件。
    """

    # 事件处理器字典，键为事件类型，值为处理器列表
    _handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    @classmethod
    def register(cls, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        注册事件处理器。重复注册同一处理器不会生效。

        Args:
            event_type: 事件类型
            handler: 事件处理器函数
        """
        handlers = cls._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    @classmethod
    def unregister(cls, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        取消注册事件处理器。

        Args:
            event_type: 事件类型
            handler: 事件处理器函数
        """
        if event_type in cls._handlers and handler in cls._handlers[event_type]:
            cls._handlers[event_type].remove(handler)
            if not cls._handlers[event_type]:
                del cls._handlers[event_type]

    @classmethod
    def handlers_for(cls, event_type: Type[DomainEvent]) -> List[EventHandler]:
        """
        获取事件类型的全部处理器，包括注册在其父类上的处理器。

        Args:
            event_type: 事件类型

        Returns:
            处理器列表，按继承链从具体到通用排列
        """
        result = []
        for klass in event_type.__mro__:
            if klass in cls._handlers:
                result.extend(cls._handlers[klass])
        return result

    @classmethod
    def publish(cls, event: DomainEvent) -> None:
        """
        发布事件。
        调用所有注册到该事件类型及其父类的处理器。

        Args:
            event: 要发布的事件
        """
        for handler in cls.handlers_for(type(event)):
            handler(event)

    @classmethod
    def resolve(cls, event_name: str) -> Type[DomainEvent]:
        """
        根据事件名称查找事件类。

        Args:
            event_name: 事件类名

        Returns:
            事件类

        Raises:
            KeyError: 未知的事件名称
        """
        return DomainEvent._registry[event_name]

    @classmethod
    def clear_handlers(cls) -> None:
        """
        清除所有事件处理器。
        通常用于测试环境的重置。
        """
        cls._handlers.clear()
