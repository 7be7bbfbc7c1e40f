"""
审计日志仓储接口。
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from audit.domain.audit_log import AuditLog


class AuditLogRepository(ABC):

    @abstractmethod
    def add(self, log: AuditLog) -> None:
        pass

    @abstractmethod
    def search(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Any = None,
        action: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[AuditLog], int]:
        """按条件分页查询，按创建时间倒序"""
        pass
