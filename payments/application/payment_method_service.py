"""
支付方式应用服务。
"""
from typing import Callable, List, Optional

from loguru import logger

from core.application.services import ApplicationService, service_operation
from core.domain import (
    BusinessRuleViolationException,
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from payments.application.commands import (
    AddPaymentMethodCommand,
    DeletePaymentMethodCommand,
    SetDefaultPaymentMethodCommand,
)
from payments.application.dtos import PaymentMethodDTO
from payments.domain import (
    CardDetails,
    PaymentMethod,
    PaymentMethodRepository,
    PaymentMethodType,
    PaymentProvider,
)
from payments.infrastructure.providers import PaymentProviderService

CACHE_TIMEOUT = 900


class PaymentMethodApplicationService(ApplicationService):

    def __init__(
        self,
        payment_method_repository: PaymentMethodRepository,
        provider_factory: Callable[[str], PaymentProviderService],
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.payment_method_repository = payment_method_repository
        self.provider_factory = provider_factory

    def _get_owned_method(self, method_id, user_id) -> PaymentMethod:
        method = self.payment_method_repository.get_by_id(method_id)
        if method is None or not method.belongs_to(user_id):
            raise EntityNotFoundException("PaymentMethod", method_id)
        return method

    def _unset_other_defaults(self, method: PaymentMethod) -> None:
        for other in self.payment_method_repository.get_by_user(method.user_id):
            if other.id != method.id and other.is_default:
                other.set_default(False)
                self.payment_method_repository.save(other)

    def _build_method(self, command: AddPaymentMethodCommand, is_default: bool) -> PaymentMethod:
        if command.type == PaymentMethodType.CREDIT_CARD:
            if not command.card_brand or not command.last_four_digits:
                raise ValidationException("card_details", "银行卡信息不能为空")
            if command.expiry_month is None or command.expiry_year is None:
                raise ValidationException("card_details", "银行卡有效期不能为空")
            card = CardDetails(
                command.card_brand, command.last_four_digits, command.expiry_month, command.expiry_year
            )
            return PaymentMethod.create_card(
                command.user_id, command.provider, command.token, card, is_default, command.metadata
            )
        if command.type == PaymentMethodType.PAYPAL:
            return PaymentMethod.create_paypal(
                command.user_id, command.token, command.email, is_default, command.metadata
            )
        raise ValidationException("type", f"无效的支付方式类型: {command.type}")

    def _stripe_customer_id(self, existing: List[PaymentMethod]) -> Optional[str]:
        return next(
            (m.metadata["stripe_customer_id"] for m in existing if m.metadata.get("stripe_customer_id")),
            None,
        )

    # ==================== 命令处理方法 ====================

    @service_operation("添加支付方式")
    def add_payment_method(self, command: AddPaymentMethodCommand) -> PaymentMethodDTO:
        """
        添加支付方式。用户的第一个支付方式自动成为默认支付方式。
        Stripe银行卡会绑定到用户的Stripe客户，客户不存在时先创建。

        Args:
            command: 添加支付方式命令

        Returns:
            支付方式DTO

        Raises:
            DuplicateEntityException: 令牌已存在
            ValidationException: 参数无效
            BusinessRuleViolationException: 银行卡已过期
            PaymentDeclinedException: 网关拒绝绑定
            ExternalServiceException: 支付网关调用失败
        """
        with self.transaction_manager.start():
            if self.payment_method_repository.token_exists(command.user_id, command.token):
                raise DuplicateEntityException("PaymentMethod", "token", command.token)
            existing = self.payment_method_repository.get_by_user(command.user_id)
            method = self._build_method(command, command.is_default or not existing)

            if method.provider == PaymentProvider.STRIPE and method.type == PaymentMethodType.CREDIT_CARD:
                provider = self.provider_factory(method.provider)
                customer_id = self._stripe_customer_id(existing)
                if customer_id is None:
                    if not command.user_email:
                        raise ValidationException("email", "创建支付客户需要用户邮箱")
                    customer_id = provider.create_customer(command.user_id, command.user_email)
                provider.attach_payment_method(method.token, customer_id)
                method.metadata["stripe_customer_id"] = customer_id

            if method.is_default:
                self._unset_other_defaults(method)
            self.payment_method_repository.save(method)
            logger.info(f"支付方式已添加: {method.id} 用户={command.user_id}")
            return PaymentMethodDTO.from_domain(method)

    @service_operation("设置默认支付方式")
    def set_default_payment_method(self, command: SetDefaultPaymentMethodCommand) -> PaymentMethodDTO:
        """
        Raises:
            EntityNotFoundException: 支付方式不存在或不属于该用户
            BusinessRuleViolationException: 支付方式已停用
        """
        with self.transaction_manager.start():
            method = self._get_owned_method(command.id, command.user_id)
            if not method.is_active:
                raise BusinessRuleViolationException("PaymentMethod.Inactive", "支付方式已停用")
            self._unset_other_defaults(method)
            method.set_default(True)
            if method.domain_events:
                self.payment_method_repository.save(method)
            return PaymentMethodDTO.from_domain(method)

    @service_operation("删除支付方式")
    def delete_payment_method(self, command: DeletePaymentMethodCommand) -> None:
        """删除支付方式。删除默认支付方式后，最早添加的有效支付方式成为默认。"""
        with self.transaction_manager.start():
            method = self._get_owned_method(command.id, command.user_id)
            method.mark_deleted()
            self.payment_method_repository.delete(method)
            if method.is_default:
                remaining = [m for m in self.payment_method_repository.get_by_user(command.user_id) if m.is_active]
                if remaining:
                    successor = min(remaining, key=lambda m: m.created_at)
                    successor.set_default(True)
                    self.payment_method_repository.save(successor)
            logger.info(f"支付方式已删除: {method.id}")

    # ==================== 查询处理方法 ====================

    @service_operation("获取支付方式")
    def get_payment_method(self, method_id, user_id) -> PaymentMethodDTO:
        return PaymentMethodDTO.from_domain(self._get_owned_method(method_id, user_id))

    @service_operation("获取用户支付方式")
    def get_user_payment_methods(self, user_id) -> List[PaymentMethodDTO]:
        return self._cached(
            f"payment-methods:{user_id}",
            lambda: [PaymentMethodDTO.from_domain(m) for m in self.payment_method_repository.get_by_user(user_id)],
            CACHE_TIMEOUT,
        )
