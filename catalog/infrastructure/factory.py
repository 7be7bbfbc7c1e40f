"""
商品目录基础设施层工厂。
负责创建仓储和搜索索引实例，并组装分类、属性、商品和搜索应用服务。
"""
from typing import Optional

from core.infrastructure.cache import CacheService, create_cache_service
from core.infrastructure.storage import FileStorageService, create_storage_service
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager
from catalog.application import (
    AttributeApplicationService,
    CategoryApplicationService,
    ProductApplicationService,
    ProductSearchApplicationService,
)
from catalog.infrastructure.repositories import (
    DjangoAttributeRepository,
    DjangoCategoryRepository,
    DjangoProductRepository,
)
from catalog.infrastructure.services import DjangoProductSearchService


class CatalogInfrastructureFactory:
    """
    商品目录基础设施层工厂类。
    同一工厂内的仓储实例只创建一次。
    """

    def __init__(
        self,
        cache_service: Optional[CacheService] = None,
        transaction_manager: Optional[TransactionManager] = None,
        storage_service: Optional[FileStorageService] = None
    ):
        """
        初始化商品目录基础设施层工厂。

        Args:
            cache_service: 缓存服务，默认按配置创建
            transaction_manager: 事务管理器，默认使用Django事务
            storage_service: 对象存储服务，默认按配置创建
        """
        self.cache_service = cache_service or create_cache_service()
        self.transaction_manager = transaction_manager or DjangoTransactionManager()
        self.storage_service = storage_service
        self._category_repository = None
        self._attribute_repository = None
        self._product_repository = None
        self._search_service = None

    def create_category_repository(self) -> DjangoCategoryRepository:
        if not self._category_repository:
            self._category_repository = DjangoCategoryRepository()
        return self._category_repository

    def create_attribute_repository(self) -> DjangoAttributeRepository:
        if not self._attribute_repository:
            self._attribute_repository = DjangoAttributeRepository()
        return self._attribute_repository

    def create_product_repository(self) -> DjangoProductRepository:
        if not self._product_repository:
            self._product_repository = DjangoProductRepository()
        return self._product_repository

    def create_search_index(self) -> DjangoProductSearchService:
        if not self._search_service:
            self._search_service = DjangoProductSearchService()
        return self._search_service

    def create_category_service(self) -> CategoryApplicationService:
        return CategoryApplicationService(
            category_repository=self.create_category_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )

    def create_attribute_service(self) -> AttributeApplicationService:
        return AttributeApplicationService(
            attribute_repository=self.create_attribute_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )

    def create_product_service(self) -> ProductApplicationService:
        if self.storage_service is None:
            self.storage_service = create_storage_service()
        return ProductApplicationService(
            product_repository=self.create_product_repository(),
            category_repository=self.create_category_repository(),
            attribute_repository=self.create_attribute_repository(),
            storage_service=self.storage_service,
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )

    def create_search_service(self) -> ProductSearchApplicationService:
        return ProductSearchApplicationService(
            search_service=self.create_search_index(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )
