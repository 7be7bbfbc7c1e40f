"""
属性聚合根。
属性描述商品的可配置特征，如颜色、尺寸；标记为变体属性的才能用于区分商品变体。
"""
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain import AggregateRoot, ValidationException
from catalog.domain.events import AttributeCreatedEvent, AttributeDeletedEvent, AttributeUpdatedEvent


class AttributeType:
    """属性类型"""
    TEXT = "Text"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    SELECT = "Select"
    COLOR = "Color"
    DATE = "Date"
    DIMENSIONS = "Dimensions"
    WEIGHT = "Weight"

    ALL = (TEXT, NUMBER, BOOLEAN, SELECT, COLOR, DATE, DIMENSIONS, WEIGHT)


class Attribute(AggregateRoot):
    """属性聚合根"""

    def __init__(
        self,
        id: Any = None,
        name: str = "",
        display_name: str = "",
        type: str = AttributeType.TEXT,
        configuration: Optional[Dict[str, Any]] = None,
        filterable: bool = False,
        searchable: bool = False,
        is_variant: bool = False,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.name = name
        self.display_name = display_name
        self.type = type
        self.configuration = configuration or {}
        self.filterable = filterable
        self.searchable = searchable
        self.is_variant = is_variant

    @staticmethod
    def _validate(name: str, display_name: str, type: str) -> None:
        if not name or not name.strip():
            raise ValidationException("name", "属性名称不能为空")
        if len(name.strip()) > 100:
            raise ValidationException("name", "属性名称不能超过100个字符")
        if not display_name or not display_name.strip():
            raise ValidationException("display_name", "显示名称不能为空")
        if type not in AttributeType.ALL:
            raise ValidationException("type", f"未知的属性类型: {type}")

    @classmethod
    def create(
        cls,
        name: str,
        display_name: str,
        type: str,
        configuration: Optional[Dict[str, Any]] = None,
        filterable: bool = False,
        searchable: bool = False,
        is_variant: bool = False
    ) -> 'Attribute':
        """
        创建属性。

        Raises:
            ValidationException: 名称、显示名称或类型无效
        """
        cls._validate(name, display_name, type)
        attribute = cls(
            name=name.strip(),
            display_name=display_name.strip(),
            type=type,
            configuration=dict(configuration or {}),
            filterable=filterable,
            searchable=searchable,
            is_variant=is_variant,
        )
        attribute.add_domain_event(AttributeCreatedEvent(attribute.id))
        return attribute

    def update(
        self,
        display_name: str,
        configuration: Optional[Dict[str, Any]] = None,
        filterable: Optional[bool] = None,
        searchable: Optional[bool] = None,
        is_variant: Optional[bool] = None
    ) -> None:
        """更新属性，名称和类型创建后不可修改"""
        self._validate(self.name, display_name, self.type)
        self.display_name = display_name.strip()
        if configuration is not None:
            self.configuration = dict(configuration)
        if filterable is not None:
            self.filterable = filterable
        if searchable is not None:
            self.searchable = searchable
        if is_variant is not None:
            self.is_variant = is_variant
        self.add_domain_event(AttributeUpdatedEvent(self.id))

    def update_configuration(self, key: str, value: Any) -> None:
        if not key or not key.strip():
            raise ValidationException("configuration", "配置键不能为空")
        self.configuration[key] = value
        self.add_domain_event(AttributeUpdatedEvent(self.id))

    def mark_deleted(self) -> None:
        self.add_domain_event(AttributeDeletedEvent(self.id))
