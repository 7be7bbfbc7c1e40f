"""
支付基础设施层工厂。
"""
from typing import Callable, Optional

from core.infrastructure.cache import CacheService, create_cache_service
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager
from payments.application import PaymentApplicationService, PaymentMethodApplicationService
from payments.infrastructure.providers import PaymentProviderService, create_payment_provider
from payments.infrastructure.repositories import DjangoPaymentMethodRepository, DjangoPaymentRepository
from sales.infrastructure.repositories import DjangoOrderRepository


class PaymentsInfrastructureFactory:
    """
    支付基础设施层工厂类。
    provider_factory用于按名称创建支付网关，默认读取STRIPE_SETTINGS。
    """

    def __init__(
        self,
        cache_service: Optional[CacheService] = None,
        transaction_manager: Optional[TransactionManager] = None,
        provider_factory: Optional[Callable[[str], PaymentProviderService]] = None
    ):
        self.cache_service = cache_service or create_cache_service()
        self.transaction_manager = transaction_manager or DjangoTransactionManager()
        self.provider_factory = provider_factory or create_payment_provider
        self._payment_repository = None
        self._payment_method_repository = None
        self._order_repository = None

    def create_payment_repository(self) -> DjangoPaymentRepository:
        if not self._payment_repository:
            self._payment_repository = DjangoPaymentRepository()
        return self._payment_repository

    def create_payment_method_repository(self) -> DjangoPaymentMethodRepository:
        if not self._payment_method_repository:
            self._payment_method_repository = DjangoPaymentMethodRepository()
        return self._payment_method_repository

    def create_order_repository(self) -> DjangoOrderRepository:
        if not self._order_repository:
            self._order_repository = DjangoOrderRepository()
        return self._order_repository

    def create_payment_service(self) -> PaymentApplicationService:
        return PaymentApplicationService(
            payment_repository=self.create_payment_repository(),
            payment_method_repository=self.create_payment_method_repository(),
            order_repository=self.create_order_repository(),
            provider_factory=self.provider_factory,
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )

    def create_payment_method_service(self) -> PaymentMethodApplicationService:
        return PaymentMethodApplicationService(
            payment_method_repository=self.create_payment_method_repository(),
            provider_factory=self.provider_factory,
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )
