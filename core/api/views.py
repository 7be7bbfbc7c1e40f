"""
系统管理API视图。
"""
import logging

from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.cache import create_cache_service
from core.infrastructure.permissions import IsAdminOrManager

logger = logging.getLogger(__name__)


class CacheClearView(ApiBaseView):
    """清空全部缓存，返回清除的键数量"""
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        count = create_cache_service().clear()
        logger.info(f"缓存已清空: {count}个键, 操作人={request.user.id}")
        return self.success_response(data={"cleared": count}, message="缓存已清空")
