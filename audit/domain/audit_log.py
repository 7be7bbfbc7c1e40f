"""
审计日志。
记录实体的创建、更新和删除，日志写入后不再修改。
"""
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain import Entity, ValidationException


class AuditAction:
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"

    ALL = (CREATE, UPDATE, DELETE)

    @classmethod
    def validate(cls, value: str) -> str:
        if value not in cls.ALL:
            raise ValidationException("action", f"无效的审计操作: {value}")
        return value

    @classmethod
    def for_event(cls, event_name: str) -> str:
        """按事件名推断操作：Created事件为创建，Deleted事件为删除，其余为更新"""
        if event_name.endswith("CreatedEvent"):
            return cls.CREATE
        if event_name.endswith("DeletedEvent"):
            return cls.DELETE
        return cls.UPDATE


class AuditLog(Entity):
    """审计日志实体"""

    def __init__(
        self,
        id: Any = None,
        entity_type: str = "",
        entity_id: str = "",
        action: str = AuditAction.UPDATE,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        user_id: Any = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        app_version: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at)
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.action = action
        self.old_values = old_values
        self.new_values = new_values
        self.user_id = user_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.app_version = app_version

    @classmethod
    def create(
        cls,
        entity_type: str,
        entity_id: Any,
        action: str,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        user_id: Any = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        app_version: Optional[str] = None
    ) -> 'AuditLog':
        """
        创建审计日志。

        Raises:
            ValidationException: 实体类型或实体ID为空，或操作无效
        """
        if not entity_type or not entity_type.strip():
            raise ValidationException("entity_type", "实体类型不能为空")
        if entity_id is None or not str(entity_id).strip():
            raise ValidationException("entity_id", "实体ID不能为空")
        AuditAction.validate(action)
        return cls(
            entity_type=entity_type.strip(),
            entity_id=str(entity_id),
            action=action,
            old_values=old_values,
            new_values=new_values,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            app_version=app_version,
        )
