"""
审计应用服务层的数据传输对象(DTOs)。
"""
from typing import Any, Dict

from audit.domain import AuditLog


class AuditLogDTO:

    def __init__(self, log: AuditLog):
        self.id = str(log.id)
        self.entity_type = log.entity_type
        self.entity_id = log.entity_id
        self.action = log.action
        self.old_values = log.old_values
        self.new_values = log.new_values
        self.user_id = str(log.user_id) if log.user_id else None
        self.ip_address = log.ip_address
        self.user_agent = log.user_agent
        self.app_version = log.app_version
        self.created_at = log.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "old_values": self.old_values,
            "new_values": self.new_values,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "app_version": self.app_version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
