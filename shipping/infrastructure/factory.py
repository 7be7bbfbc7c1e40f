"""
配送基础设施层工厂。
"""
from typing import Optional

from core.infrastructure.cache import CacheService, create_cache_service
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager
from shipping.application import AddressApplicationService
from shipping.infrastructure.repositories import DjangoAddressRepository


class ShippingInfrastructureFactory:
    def __init__(
        self,
        cache_service: Optional[CacheService] = None,
        transaction_manager: Optional[TransactionManager] = None
    ):
        self.cache_service = cache_service or create_cache_service()
        self.transaction_manager = transaction_manager or DjangoTransactionManager()
        self._address_repository = None

    def create_address_repository(self) -> DjangoAddressRepository:
        if not self._address_repository:
            self._address_repository = DjangoAddressRepository()
        return self._address_repository

    def create_address_service(self) -> AddressApplicationService:
        return AddressApplicationService(
            address_repository=self.create_address_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )
