"""
支付聚合根。
一次支付对应订单的一次扣款尝试，记录支付网关返回的交易信息。
"""
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    Money,
    ValidationException,
    utc_now,
)
from payments.domain.events import (
    PaymentCreatedEvent,
    PaymentFailedEvent,
    PaymentRefundedEvent,
    PaymentStatusChangedEvent,
    PaymentSucceededEvent,
)


class PaymentStatus:
    PENDING = "Pending"
    PROCESSING = "Processing"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    REFUNDED = "Refunded"
    CANCELED = "Canceled"
    REQUIRES_ACTION = "RequiresAction"
    REQUIRES_CONFIRMATION = "RequiresConfirmation"

    ALL = (
        PENDING, PROCESSING, SUCCEEDED, FAILED, REFUNDED,
        CANCELED, REQUIRES_ACTION, REQUIRES_CONFIRMATION,
    )

    @classmethod
    def validate(cls, value: str) -> str:
        if value not in cls.ALL:
            raise ValidationException("payment_status", f"无效的支付状态: {value}")
        return value


class PaymentMethodType:
    CREDIT_CARD = "CreditCard"
    PAYPAL = "PayPal"

    ALL = (CREDIT_CARD, PAYPAL)


class PaymentProvider:
    STRIPE = "Stripe"
    PAYPAL = "PayPal"

    ALL = (STRIPE, PAYPAL)


class Payment(AggregateRoot):
    """支付聚合根"""

    def __init__(
        self,
        id: Any = None,
        order_id: Any = None,
        user_id: Any = None,
        amount: Optional[Money] = None,
        method_type: str = PaymentMethodType.CREDIT_CARD,
        provider: str = PaymentProvider.STRIPE,
        status: str = PaymentStatus.PENDING,
        external_reference: Optional[str] = None,
        transaction_id: Optional[str] = None,
        payment_method_id: Any = None,
        processed_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
        refunded_amount: Optional[Money] = None,
        metadata: Optional[Dict[str, Any]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.order_id = order_id
        self.user_id = user_id
        self.amount = amount
        self.method_type = method_type
        self.provider = provider
        self.status = status
        self.external_reference = external_reference
        self.transaction_id = transaction_id
        self.payment_method_id = payment_method_id
        self.processed_at = processed_at
        self.error_message = error_message
        self.refunded_amount = refunded_amount or Money.zero(amount.currency if amount else Money.DEFAULT_CURRENCY)
        self.metadata = metadata or {}

    @classmethod
    def create(
        cls,
        order_id: Any,
        user_id: Any,
        amount: Money,
        method_type: str,
        provider: str,
        external_reference: Optional[str] = None,
        payment_method_id: Any = None
    ) -> 'Payment':
        """
        创建待处理的支付记录。

        Raises:
            ValidationException: 订单、金额、支付类型或支付网关无效
        """
        if order_id is None:
            raise ValidationException("order_id", "订单不能为空")
        if amount is None:
            raise ValidationException("amount", "金额不能为空")
        if method_type not in PaymentMethodType.ALL:
            raise ValidationException("method_type", f"无效的支付类型: {method_type}")
        if provider not in PaymentProvider.ALL:
            raise ValidationException("provider", f"无效的支付网关: {provider}")
        payment = cls(
            order_id=order_id,
            user_id=user_id,
            amount=amount,
            method_type=method_type,
            provider=provider,
            external_reference=external_reference,
            payment_method_id=payment_method_id,
        )
        payment.add_domain_event(PaymentCreatedEvent(payment.id, order_id))
        return payment

    def update_status(self, status: str, transaction_id: Optional[str] = None,
                      error_message: Optional[str] = None) -> None:
        PaymentStatus.validate(status)
        if transaction_id:
            self.transaction_id = transaction_id
        if error_message:
            self.error_message = error_message
        if self.status == status:
            return
        old_status = self.status
        self.status = status
        if status in (PaymentStatus.SUCCEEDED, PaymentStatus.FAILED, PaymentStatus.REFUNDED):
            self.processed_at = utc_now()
        self.add_domain_event(PaymentStatusChangedEvent(self.id, self.order_id, old_status, status))

    def mark_as_succeeded(self, transaction_id: str) -> None:
        """
        Raises:
            ValidationException: 交易号为空
        """
        if not transaction_id:
            raise ValidationException("transaction_id", "交易号不能为空")
        if self.status == PaymentStatus.SUCCEEDED:
            return
        self.update_status(PaymentStatus.SUCCEEDED, transaction_id)
        self.error_message = None
        self.add_domain_event(PaymentSucceededEvent(self.id, self.order_id))

    def mark_as_failed(self, error_message: Optional[str] = None) -> None:
        if self.status == PaymentStatus.FAILED:
            return
        self.update_status(PaymentStatus.FAILED, error_message=error_message or "支付失败")
        self.add_domain_event(PaymentFailedEvent(self.id, self.order_id, self.error_message))

    def mark_as_refunded(self, transaction_id: str) -> None:
        """
        Raises:
            BusinessRuleViolationException: 支付未成功
            ValidationException: 退款交易号为空
        """
        if self.status == PaymentStatus.REFUNDED:
            return
        if self.status != PaymentStatus.SUCCEEDED:
            raise BusinessRuleViolationException("Payment.InvalidStatus", "只有成功的支付可以退款")
        if not transaction_id:
            raise ValidationException("transaction_id", "退款交易号不能为空")
        self.refunded_amount = self.amount
        self.metadata["refundTransactionId"] = transaction_id
        self.update_status(PaymentStatus.REFUNDED)
        self.add_domain_event(PaymentRefundedEvent(self.id, self.order_id))

    def ensure_refundable(self, amount: Money) -> None:
        """
        Raises:
            BusinessRuleViolationException: 支付未成功或退款超过支付金额
        """
        if self.status != PaymentStatus.SUCCEEDED:
            raise BusinessRuleViolationException("Payment.InvalidStatus", "只有成功的支付可以退款")
        if self.refunded_amount + amount > self.amount:
            raise BusinessRuleViolationException("Payment.RefundExceedsAmount", "退款金额超过支付金额")

    def record_refund(self, amount: Money, refund_id: str, reason: Optional[str] = None) -> None:
        """
        记录一次退款，累计退款达到支付金额时标记为已退款。

        Raises:
            BusinessRuleViolationException: 支付未成功或退款超过支付金额
        """
        self.ensure_refundable(amount)
        refunded = self.refunded_amount + amount
        refunds = list(self.metadata.get("refunds", []))
        refunds.append({"refundId": refund_id, "amount": str(amount.amount), "reason": reason})
        self.metadata["refunds"] = refunds
        if refunded >= self.amount:
            self.mark_as_refunded(refund_id)
        else:
            self.refunded_amount = refunded
            self.touch()

    def update_external_reference(self, external_reference: str) -> None:
        if not external_reference:
            raise ValidationException("external_reference", "外部引用不能为空")
        self.external_reference = external_reference
        self.touch()
