"""
商品目录领域事件处理器。
在分类、属性、商品数据变化后使相关缓存失效，并更新商品搜索索引。
"""
from loguru import logger

from core.domain import DomainEvents
from core.infrastructure.cache import create_cache_service
from catalog.domain import ProductSearchService
from catalog.domain.events import AttributeEvent, CategoryEvent, ProductEvent, ProductVariantEvent


def invalidate_category_cache(event: CategoryEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"category:{event.category_id}")
    cache.delete_pattern("categories:*")
    # 商品列表可能按分类过滤
    cache.delete_pattern("products:*")
    logger.debug(f"分类缓存已失效: {event.category_id}")


def invalidate_attribute_cache(event: AttributeEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"attribute:{event.attribute_id}")
    cache.delete_pattern("attributes:*")


def invalidate_product_cache(event) -> None:
    cache = create_cache_service()
    cache.delete(f"product:{event.product_id}")
    cache.delete_pattern("products:*")
    logger.debug(f"商品缓存已失效: {event.product_id}")


def _search_index() -> ProductSearchService:
    from catalog.infrastructure.services import DjangoProductSearchService
    return DjangoProductSearchService()


def update_product_search_index(event) -> None:
    _search_index().index_product(event.product_id)
    create_cache_service().delete_pattern("search:*")


def update_category_search_index(event: CategoryEvent) -> None:
    if _search_index().index_category_products(event.category_id):
        create_cache_service().delete_pattern("search:*")


def update_attribute_search_index(event: AttributeEvent) -> None:
    if _search_index().index_attribute_products(event.attribute_id):
        create_cache_service().delete_pattern("search:*")


def register_event_handlers() -> None:
    """注册商品目录的事件处理器，由CatalogConfig.ready()调用"""
    DomainEvents.register(CategoryEvent, invalidate_category_cache)
    DomainEvents.register(AttributeEvent, invalidate_attribute_cache)
    DomainEvents.register(ProductEvent, invalidate_product_cache)
    DomainEvents.register(ProductVariantEvent, invalidate_product_cache)

    DomainEvents.register(ProductEvent, update_product_search_index)
    DomainEvents.register(ProductVariantEvent, update_product_search_index)
    DomainEvents.register(CategoryEvent, update_category_search_index)
    DomainEvents.register(AttributeEvent, update_attribute_search_index)
