"""
审计应用服务。
"""
from typing import Any, Optional

from loguru import logger

from audit.application.dtos import AuditLogDTO
from audit.domain import AuditAction, AuditLog, AuditLogRepository
from core.application.pagination import PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import DomainEvent
from core.infrastructure.transaction import TransactionManager

# 不写入审计日志的事件字段
EVENT_META_FIELDS = ("id", "occurred_on")


class AuditApplicationService(ApplicationService):
    """
    审计应用服务。
    """

    def __init__(
        self,
        audit_log_repository: AuditLogRepository,
        transaction_manager: TransactionManager,
        app_version: Optional[str] = None
    ):
        super().__init__(transaction_manager)
        self.audit_log_repository = audit_log_repository
        self.app_version = app_version

    def record_event(self, event: DomainEvent) -> Optional[AuditLog]:
        """
        把领域事件记录为审计日志。没有声明实体的事件不记录。

        事件中的old_status等旧值写入old_values，其余字段写入new_values。

        Args:
            event: 领域事件

        Returns:
            写入的审计日志，未记录时返回None
        """
        entity_id = event.entity_id
        if not event.entity_type or entity_id is None or not str(entity_id).strip():
            return None

        payload = {k: v for k, v in event.to_dict().items() if k not in EVENT_META_FIELDS}
        old_values = {k[len("old_"):]: payload.pop(k) for k in list(payload) if k.startswith("old_")}
        new_values = {"event": event.event_name, **payload}

        log = AuditLog.create(
            entity_type=event.entity_type,
            entity_id=entity_id,
            action=AuditAction.for_event(event.event_name),
            old_values=old_values or None,
            new_values=new_values,
            user_id=getattr(event, "user_id", None),
            app_version=self.app_version,
        )
        self.audit_log_repository.add(log)
        logger.debug(f"审计日志已记录: {log.entity_type}:{log.entity_id} {log.action} ({event.event_name})")
        return log

    @service_operation("查询审计日志")
    def get_audit_logs(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Any = None,
        action: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> PaginatedResult:
        """
        Raises:
            ValidationException: 操作类型无效
        """
        if action:
            AuditAction.validate(action)
        logs, total = self.audit_log_repository.search(entity_type, entity_id, user_id, action, page, page_size)
        return PaginatedResult([AuditLogDTO(log) for log in logs], total, page, page_size)
