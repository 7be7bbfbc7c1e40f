"""
商品搜索应用服务。
"""
import time
from typing import Optional

from django.conf import settings
from django.utils import timezone
from loguru import logger

from core.application.services import ApplicationService, service_operation
from core.domain import ValidationException
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from catalog.application.commands import RebuildSearchIndexCommand
from catalog.application.dtos import SearchIndexRebuildDTO
from catalog.application.queries import SearchProductsQuery
from catalog.domain import SEARCH_SORT_OPTIONS, ProductSearchService, SearchCriteria, SearchResult


class ProductSearchApplicationService(ApplicationService):
    """商品搜索应用服务"""

    def __init__(
        self,
        search_service: ProductSearchService,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.search_service = search_service
        self.cache_timeout = settings.CATALOG_SETTINGS.get("SEARCH_CACHE_TIMEOUT", 300)

    @service_operation("搜索商品")
    def search_products(self, query: SearchProductsQuery) -> SearchResult:
        """
        搜索商品并统计分面。

        Raises:
            ValidationException: 价格区间或排序字段无效
        """
        if query.price_min is not None and query.price_max is not None and query.price_min > query.price_max:
            raise ValidationException("price_min", "最低价格不能大于最高价格")
        if query.sort_by not in SEARCH_SORT_OPTIONS:
            raise ValidationException("sort_by", f"不支持的排序字段: {query.sort_by}")

        criteria = SearchCriteria(
            keyword=query.keyword,
            category_ids=query.category_ids,
            category_slugs=query.category_slugs,
            attribute_filters=query.attribute_filters,
            price_min=query.price_min,
            price_max=query.price_max,
            in_stock_only=query.in_stock_only,
            active_only=query.active_only,
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_descending=query.sort_descending,
        )
        return self._cached(criteria.cache_key(), lambda: self.search_service.search(criteria), self.cache_timeout)

    @service_operation("重建搜索索引")
    def rebuild_search_index(self, command: RebuildSearchIndexCommand) -> SearchIndexRebuildDTO:
        started = time.monotonic()
        with self.transaction_manager.start():
            count = self.search_service.rebuild_index(clear_existing=command.clear_existing)
        self.cache_service.delete_pattern("search:*")
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"搜索索引已重建: {count}个商品, 耗时{duration_ms}ms")
        return SearchIndexRebuildDTO(count, timezone.now(), duration_ms)
