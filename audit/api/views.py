"""
审计日志API视图。
"""
import logging

from audit.api.serializers import AuditLogQuerySerializer
from audit.infrastructure.factory import AuditInfrastructureFactory
from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.permissions import IsAdminOrManager

logger = logging.getLogger(__name__)


class AuditLogListView(ApiBaseView):
    """按实体类型、实体ID、用户和操作过滤审计日志"""
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        page, page_size = self.get_page_params(request)
        filters = self.validate(AuditLogQuerySerializer, request.query_params)
        result = AuditInfrastructureFactory().create_audit_service().get_audit_logs(
            entity_type=filters.get("entity_type") or None,
            entity_id=filters.get("entity_id") or None,
            user_id=filters.get("user_id"),
            action=filters.get("action"),
            page=page,
            page_size=page_size,
        )
        return self.result_response(result, "查询审计日志成功")
