"""
销售基础设施层工厂。
"""
from typing import Optional

from django.conf import settings

from catalog.infrastructure.repositories import DjangoProductRepository
from core.infrastructure.cache import CacheService, create_cache_service
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager
from sales.application import CartApplicationService, OrderApplicationService
from sales.infrastructure.repositories import DjangoCartRepository, DjangoOrderRepository
from shipping.infrastructure.repositories import DjangoAddressRepository


class SalesInfrastructureFactory:
    """
    销售基础设施层工厂类。
    税率、运费和币种读取SALES_SETTINGS。
    """

    def __init__(
        self,
        cache_service: Optional[CacheService] = None,
        transaction_manager: Optional[TransactionManager] = None
    ):
        self.cache_service = cache_service or create_cache_service()
        self.transaction_manager = transaction_manager or DjangoTransactionManager()
        self.options = getattr(settings, "SALES_SETTINGS", {})
        self._cart_repository = None
        self._order_repository = None
        self._product_repository = None
        self._address_repository = None

    def create_cart_repository(self) -> DjangoCartRepository:
        if not self._cart_repository:
            self._cart_repository = DjangoCartRepository()
        return self._cart_repository

    def create_order_repository(self) -> DjangoOrderRepository:
        if not self._order_repository:
            self._order_repository = DjangoOrderRepository()
        return self._order_repository

    def create_product_repository(self) -> DjangoProductRepository:
        if not self._product_repository:
            self._product_repository = DjangoProductRepository()
        return self._product_repository

    def create_address_repository(self) -> DjangoAddressRepository:
        if not self._address_repository:
            self._address_repository = DjangoAddressRepository()
        return self._address_repository

    def create_cart_service(self) -> CartApplicationService:
        return CartApplicationService(
            cart_repository=self.create_cart_repository(),
            product_repository=self.create_product_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
            currency=self.options.get("CURRENCY", "USD"),
        )

    def create_order_service(self) -> OrderApplicationService:
        return OrderApplicationService(
            order_repository=self.create_order_repository(),
            cart_repository=self.create_cart_repository(),
            product_repository=self.create_product_repository(),
            address_repository=self.create_address_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
            options=self.options,
        )
