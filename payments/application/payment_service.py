"""
支付应用服务。
处理订单支付、退款和支付网关回调。
"""
from typing import Callable, Optional

from loguru import logger

from core.application.services import ApplicationService, service_operation
from core.domain import (
    AuthorizationException,
    BusinessRuleViolationException,
    EntityNotFoundException,
    ExternalServiceException,
    Money,
)
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from payments.application.commands import (
    ProcessOrderPaymentCommand,
    ProcessWebhookCommand,
    RefundOrderCommand,
)
from payments.application.dtos import PaymentDTO, RefundDTO
from payments.domain import (
    Payment,
    PaymentDeclinedException,
    PaymentMethodRepository,
    PaymentRepository,
    PaymentStatus,
)
from payments.infrastructure.providers import PaymentProviderService, PaymentResult, WebhookResult
from sales.domain import Order, OrderRepository, OrderStatus

WEBHOOK_CACHE_TIMEOUT = 60 * 60 * 24 * 7

# 支付成功或已退款后不再接受其他状态
FINAL_PAYMENT_STATUSES = (PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED)


class PaymentApplicationService(ApplicationService):
    """
    支付应用服务。
    支付网关按支付方式的provider通过provider_factory获取。
    """

    def __init__(
        self,
        payment_repository: PaymentRepository,
        payment_method_repository: PaymentMethodRepository,
        order_repository: OrderRepository,
        provider_factory: Callable[[str], PaymentProviderService],
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.payment_repository = payment_repository
        self.payment_method_repository = payment_method_repository
        self.order_repository = order_repository
        self.provider_factory = provider_factory

    def _get_order(self, order_id) -> Order:
        order = self.order_repository.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundException("Order", order_id)
        return order

    # ==================== 订单支付 ====================

    @service_operation("订单支付")
    def process_order_payment(self, command: ProcessOrderPaymentCommand) -> PaymentDTO:
        """
        使用用户已保存的支付方式支付订单。
        网关拒绝或调用失败时仍然保存失败的支付记录，订单支付状态置为失败。

        Args:
            command: 订单支付命令

        Returns:
            支付记录DTO

        Raises:
            EntityNotFoundException: 订单或支付方式不存在
            AuthorizationException: 订单不属于该用户
            BusinessRuleViolationException: 订单已支付、状态不是待处理或支付方式已停用
            PaymentDeclinedException: 银行卡被拒绝
            ExternalServiceException: 支付网关调用失败
        """
        failure = None
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            if not order.belongs_to(command.user_id):
                raise AuthorizationException(command.user_id, "支付订单", f"Order:{order.id}")
            if order.is_paid():
                raise BusinessRuleViolationException("Order.AlreadyPaid", "订单已支付")
            if order.status != OrderStatus.PENDING:
                raise BusinessRuleViolationException("Order.InvalidStatus", f"{order.status}状态的订单不能支付")

            method = self.payment_method_repository.get_by_id(command.payment_method_id)
            if method is None or not method.belongs_to(command.user_id):
                raise EntityNotFoundException("PaymentMethod", command.payment_method_id)
            if not method.is_active:
                raise BusinessRuleViolationException("PaymentMethod.Inactive", "支付方式已停用")

            provider = self.provider_factory(method.provider)
            payment = Payment.create(
                order.id, command.user_id, order.total, method.type, method.provider,
                command.external_reference, method.id,
            )
            order.set_payment_method(method.id)
            result: Optional[PaymentResult] = None
            try:
                result = provider.process_payment(
                    order.total,
                    method.token,
                    customer_id=method.metadata.get("stripe_customer_id"),
                    metadata={
                        "orderId": str(order.id),
                        "paymentId": str(payment.id),
                        "userId": str(command.user_id),
                    },
                )
            except (PaymentDeclinedException, ExternalServiceException) as e:
                failure = e
                payment.mark_as_failed(e.message)
                order.update_payment_status(PaymentStatus.FAILED)
            else:
                self._apply_payment_result(payment, order, result)

            self.payment_repository.save(payment)
            self.order_repository.save(order)

        if failure is not None:
            logger.warning(f"订单支付失败: {order.id} [{failure.code}] {failure.message}")
            raise failure
        logger.info(f"订单支付完成: {order.id} 支付={payment.id} 状态={payment.status}")
        return PaymentDTO.from_domain(
            payment,
            client_secret=result.client_secret if result.requires_action else None,
            requires_action=result.requires_action,
            next_action_type=result.next_action_type,
        )

    @staticmethod
    def _apply_payment_result(payment: Payment, order: Order, result: PaymentResult) -> None:
        if result.status == PaymentStatus.SUCCEEDED:
            payment.mark_as_succeeded(result.transaction_id)
            order.mark_as_paid()
        elif result.status in (PaymentStatus.FAILED, PaymentStatus.CANCELED):
            payment.update_status(result.status, result.transaction_id, "支付网关未完成扣款")
            order.update_payment_status(result.status)
        else:
            payment.update_status(result.status, result.transaction_id)
            order.update_payment_status(result.status)
        payment.update_external_reference(result.transaction_id)

    @service_operation("获取订单支付记录")
    def get_order_payments(self, order_id, user_id, is_staff: bool = False):
        order = self._get_order(order_id)
        if not is_staff and not order.belongs_to(user_id):
            raise AuthorizationException(user_id, "查看支付记录", f"Order:{order_id}")
        return [PaymentDTO.from_domain(p) for p in self.payment_repository.get_by_order(order.id)]

    # ==================== 退款 ====================

    @service_operation("订单退款")
    def refund_order(self, command: RefundOrderCommand) -> RefundDTO:
        """
        对已支付订单退款。网关退款失败时整个操作回滚。

        Raises:
            EntityNotFoundException: 订单或成功的支付记录不存在
            BusinessRuleViolationException: 订单未支付或退款金额超过可退金额
            ValidationException: 退款金额或币种无效
            ExternalServiceException: 支付网关调用失败
        """
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            payment = self.payment_repository.get_succeeded_by_order(order.id)
            if payment is None or not payment.transaction_id:
                raise EntityNotFoundException("Payment", f"order:{order.id}")

            amount = None
            if command.amount is not None:
                amount = Money(command.amount, command.currency or order.currency)
            refund_amount = order.refund(amount, command.reason)
            is_full = order.payment_status == PaymentStatus.REFUNDED
            payment.ensure_refundable(refund_amount)

            provider = self.provider_factory(payment.provider)
            full_provider_refund = amount is None and payment.refunded_amount.is_zero()
            refund_id = provider.refund_payment(
                payment.transaction_id,
                None if full_provider_refund else refund_amount,
                command.reason,
            )
            payment.record_refund(refund_amount, refund_id, command.reason)

            self.payment_repository.save(payment)
            self.order_repository.save(order)
            logger.info(f"订单已退款: {order.id} 金额={refund_amount} 全额={is_full}")
            return RefundDTO(
                order.id, payment.id, refund_id, refund_amount, order.refunded_amount,
                order.payment_status, is_full, command.reason,
            )

    # ==================== 回调 ====================

    @service_operation("处理支付回调")
    def process_webhook(self, command: ProcessWebhookCommand) -> WebhookResult:
        """
        校验并处理支付网关回调，同一事件只处理一次。

        Raises:
            ValidationException: 网关不支持、签名无效或内容无法解析
        """
        provider = self.provider_factory(command.provider)
        result = provider.process_webhook(command.payload, command.signature)

        cache_key = f"webhook:{result.event_id}"
        if self.cache_service.exists(cache_key):
            logger.info(f"回调事件已处理过: {result.event_id}")
            result.processing_message = "事件已处理"
            result.is_processed = True
            return result

        if result.transaction_id and result.payment_status:
            with self.transaction_manager.start():
                self._apply_webhook(result)

        self.cache_service.set(cache_key, True, WEBHOOK_CACHE_TIMEOUT)
        return result

    def _apply_webhook(self, result: WebhookResult) -> None:
        payment = self.payment_repository.get_by_transaction_id(result.transaction_id)
        if payment is None:
            logger.warning(f"回调对应的支付记录不存在: {result.transaction_id} 订单={result.order_id}")
            return
        if payment.status in FINAL_PAYMENT_STATUSES:
            return

        order = self.order_repository.get_by_id(payment.order_id)
        status = result.payment_status
        if status == PaymentStatus.SUCCEEDED:
            payment.mark_as_succeeded(result.transaction_id)
            if order is not None:
                order.mark_as_paid()
        elif status == PaymentStatus.FAILED:
            payment.mark_as_failed(result.processing_message)
            if order is not None and not order.is_paid():
                order.update_payment_status(PaymentStatus.FAILED)
        else:
            payment.update_status(status)
            if order is not None and not order.is_paid():
                order.update_payment_status(status)

        self.payment_repository.save(payment)
        if order is not None:
            self.order_repository.save(order)
        logger.info(f"回调已更新支付记录: {payment.id} 状态={payment.status}")
