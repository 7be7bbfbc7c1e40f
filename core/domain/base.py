"""
核心领域模型基类模块。
包含Entity基类，用于所有具有唯一标识的领域对象。
"""
from datetime import datetime, timezone
from typing import Any, Optional
import uuid


def utc_now() -> datetime:
    """返回带时区的当前UTC时间"""
    return datetime.now(timezone.utc)


class Entity:
    """
    实体基类。
    实体是具有唯一标识的领域对象，其相等性通过标识而非属性值判断。
    """
    def __init__(
        self,
        id: Any = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        """
        初始化实体。

        Args:
            id: 实体标识，如果未提供，将自动生成UUID
            created_at: 创建时间，重建实体时由仓储传入
            updated_at: 更新时间，重建实体时由仓储传入
        """
        self.id = id if id is not None else uuid.uuid4()
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or self.created_at

    def touch(self) -> None:
        """刷新实体的更新时间"""
        self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        """
        判断两个实体是否相等，通过比较它们的标识。

        Args:
            other: 另一个实体

        Returns:
            如果两个实体类型相同且标识相等，则返回True；否则返回False
        """
        if not isinstance(other, Entity) or type(other) is not type(self):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))
