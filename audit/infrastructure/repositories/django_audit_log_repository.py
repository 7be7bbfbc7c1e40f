"""
基于Django ORM的审计日志仓储实现。
"""
from typing import Any, List, Optional, Tuple

from audit.domain import AuditLog, AuditLogRepository
from audit.infrastructure.models import AuditLogModel
from core.infrastructure.repositories import paginate_queryset


class DjangoAuditLogRepository(AuditLogRepository):

    @staticmethod
    def _to_domain(model: AuditLogModel) -> AuditLog:
        return AuditLog(
            id=model.id,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            action=model.action,
            old_values=model.old_values,
            new_values=model.new_values,
            user_id=model.user_id,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            app_version=model.app_version,
            created_at=model.created_at,
        )

    def add(self, log: AuditLog) -> None:
        AuditLogModel.objects.create(
            id=log.id,
            entity_type=log.entity_type,
            entity_id=log.entity_id,
            action=log.action,
            old_values=log.old_values,
            new_values=log.new_values,
            user_id=log.user_id,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            app_version=log.app_version,
            created_at=log.created_at,
        )

    def search(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Any = None,
        action: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[AuditLog], int]:
        queryset = AuditLogModel.objects.all()
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        if entity_id:
            queryset = queryset.filter(entity_id=str(entity_id))
        if user_id:
            queryset = queryset.filter(user_id=user_id)
        if action:
            queryset = queryset.filter(action=action)
        models, total = paginate_queryset(queryset.order_by("-created_at", "id"), page, page_size)
        return [self._to_domain(m) for m in models], total
