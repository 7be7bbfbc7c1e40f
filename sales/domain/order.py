"""
订单聚合根。
订单保存下单时的地址和商品快照，金额在添加商品项时重新计算。
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    Entity,
    InsufficientStockException,
    Money,
    PostalAddress,
    ValidationException,
    utc_now,
)
from catalog.domain import Product, ProductVariant
from payments.domain.payment import PaymentStatus
from sales.domain.events import (
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderDeliveredEvent,
    OrderPaidEvent,
    OrderPaymentStatusChangedEvent,
    OrderRefundedEvent,
    OrderShippedEvent,
    OrderStatusChangedEvent,
)


class OrderStatus:
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    ALL = (PENDING, PROCESSING, SHIPPED, DELIVERED, CANCELLED)

    # 顾客可以自行取消的状态
    CUSTOMER_CANCELLABLE = (PENDING, PROCESSING)

    @classmethod
    def validate(cls, value: str) -> str:
        if value not in cls.ALL:
            raise ValidationException("status", f"无效的订单状态: {value}")
        return value


class OrderItem(Entity):
    """订单商品项，product_data保存下单时的商品快照"""

    def __init__(
        self,
        id: Any = None,
        order_id: Any = None,
        product_id: Any = None,
        variant_id: Any = None,
        quantity: int = 1,
        unit_price: Optional[Money] = None,
        total_price: Optional[Money] = None,
        product_data: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at, updated_at)
        self.order_id = order_id
        self.product_id = product_id
        self.variant_id = variant_id
        self.quantity = quantity
        self.unit_price = unit_price
        self.total_price = total_price if total_price is not None else unit_price * quantity
        self.product_data = product_data or {}

    @classmethod
    def snapshot(cls, order_id: Any, product: Product, quantity: int, unit_price: Money,
                 variant: Optional[ProductVariant] = None) -> 'OrderItem':
        product_data = {
            "name": product.name,
            "sku": product.sku,
            "slug": product.slug.value if product.slug else None,
        }
        if variant is not None:
            product_data["variant_sku"] = variant.sku
            product_data["variant_attributes"] = dict(variant.attributes)
        return cls(
            order_id=order_id,
            product_id=product.id,
            variant_id=variant.id if variant else None,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
            product_data=product_data,
        )


class Order(AggregateRoot):
    """订单聚合根"""

    def __init__(
        self,
        id: Any = None,
        user_id: Any = None,
        shipping_address_id: Any = None,
        billing_address_id: Any = None,
        shipping_address: Optional[PostalAddress] = None,
        billing_address: Optional[PostalAddress] = None,
        subtotal: Optional[Money] = None,
        tax: Optional[Money] = None,
        shipping_cost: Optional[Money] = None,
        status: str = OrderStatus.PENDING,
        payment_status: str = PaymentStatus.PENDING,
        shipping_method: Optional[str] = None,
        payment_method_id: Any = None,
        refunded_amount: Optional[Money] = None,
        refunded_at: Optional[datetime] = None,
        refund_reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        items: Optional[List[OrderItem]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        currency = (subtotal or tax or shipping_cost or Money.zero()).currency
        self.user_id = user_id
        self.shipping_address_id = shipping_address_id
        self.billing_address_id = billing_address_id
        self.shipping_address = shipping_address
        self.billing_address = billing_address
        self.subtotal = subtotal or Money.zero(currency)
        self.tax = tax or Money.zero(currency)
        self.shipping_cost = shipping_cost or Money.zero(currency)
        self.status = status
        self.payment_status = payment_status
        self.shipping_method = shipping_method
        self.payment_method_id = payment_method_id
        self.refunded_amount = refunded_amount or Money.zero(currency)
        self.refunded_at = refunded_at
        self.refund_reason = refund_reason
        self.metadata = metadata or {}
        self._items: List[OrderItem] = list(items or [])

    @classmethod
    def create(
        cls,
        user_id: Any,
        shipping_address_id: Any,
        shipping_address: PostalAddress,
        billing_address_id: Any,
        billing_address: PostalAddress,
        tax: Money,
        shipping_cost: Money,
        shipping_method: Optional[str] = None
    ) -> 'Order':
        """
        创建订单，小计为0，随商品项的添加重新计算。

        Raises:
            ValidationException: 收货地址或金额为空
        """
        if shipping_address is None:
            raise ValidationException("shipping_address", "收货地址不能为空")
        if tax is None or shipping_cost is None:
            raise ValidationException("amount", "金额不能为空")
        order = cls(
            user_id=user_id,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id or shipping_address_id,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            subtotal=Money.zero(tax.currency),
            tax=tax,
            shipping_cost=shipping_cost,
            shipping_method=shipping_method,
        )
        order.add_domain_event(OrderCreatedEvent(order.id))
        return order

    @property
    def items(self) -> List[OrderItem]:
        return list(self._items)

    @property
    def total(self) -> Money:
        return self.subtotal + self.tax + self.shipping_cost

    @property
    def refundable_amount(self) -> Money:
        return self.total - self.refunded_amount

    @property
    def currency(self) -> str:
        return self.subtotal.currency

    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.SUCCEEDED

    def belongs_to(self, user_id: Any) -> bool:
        return self.user_id is not None and str(self.user_id) == str(user_id)

    def _recalculate(self) -> None:
        subtotal = Money.zero(self.currency)
        for item in self._items:
            subtotal = subtotal + item.total_price
        self.subtotal = subtotal

    # ==================== 商品项 ====================

    def add_item(self, product: Product, quantity: int, unit_price: Money,
                 variant: Optional[ProductVariant] = None) -> OrderItem:
        """
        添加商品项并重新计算小计。

        Raises:
            ValidationException: 数量或单价无效
            BusinessRuleViolationException: 订单不是待处理状态
            InsufficientStockException: 变体库存不足
        """
        if quantity <= 0:
            raise ValidationException("quantity", "数量必须大于0")
        if unit_price is None:
            raise ValidationException("unit_price", "单价不能为空")
        if self.status != OrderStatus.PENDING:
            raise BusinessRuleViolationException("Order.InvalidStatus", "只有待处理的订单可以添加商品")
        if variant is not None and not variant.has_stock(quantity):
            raise InsufficientStockException(variant.id, quantity, variant.stock_quantity)

        item = OrderItem.snapshot(self.id, product, quantity, unit_price, variant)
        self._items.append(item)
        self._recalculate()
        self.touch()
        return item

    # ==================== 状态流转 ====================

    def update_status(self, status: str) -> None:
        OrderStatus.validate(status)
        if self.status == status:
            return
        old_status = self.status
        self.status = status
        self.add_domain_event(OrderStatusChangedEvent(self.id, old_status, status))

    def update_payment_status(self, payment_status: str) -> None:
        PaymentStatus.validate(payment_status)
        if self.payment_status == payment_status:
            return
        old_status = self.payment_status
        self.payment_status = payment_status
        self.add_domain_event(OrderPaymentStatusChangedEvent(self.id, old_status, payment_status))

    def set_payment_method(self, payment_method_id: Any) -> None:
        if payment_method_id is None:
            raise ValidationException("payment_method_id", "支付方式不能为空")
        self.payment_method_id = payment_method_id
        self.touch()

    def mark_as_paid(self) -> None:
        """标记订单已支付，待处理的订单进入处理中状态。重复调用无效果。"""
        if self.is_paid():
            return
        self.update_payment_status(PaymentStatus.SUCCEEDED)
        if self.status == OrderStatus.PENDING:
            self.update_status(OrderStatus.PROCESSING)
        self.add_domain_event(OrderPaidEvent(self.id))

    def mark_as_shipped(self, tracking_number: Optional[str] = None) -> None:
        """
        Raises:
            BusinessRuleViolationException: 订单未支付
        """
        if self.status == OrderStatus.SHIPPED:
            return
        if not self.is_paid():
            raise BusinessRuleViolationException("Order.PaymentRequired", "订单未支付，不能发货")
        if self.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            raise BusinessRuleViolationException("Order.InvalidStatus", f"{self.status}状态的订单不能发货")
        self.status = OrderStatus.SHIPPED
        if tracking_number:
            self.metadata["trackingNumber"] = tracking_number
        self.add_domain_event(OrderShippedEvent(self.id, tracking_number))

    def mark_as_delivered(self) -> None:
        if self.status == OrderStatus.DELIVERED:
            return
        if self.status != OrderStatus.SHIPPED:
            raise BusinessRuleViolationException("Order.InvalidStatus", "只有已发货的订单可以标记为送达")
        self.status = OrderStatus.DELIVERED
        self.add_domain_event(OrderDeliveredEvent(self.id))

    def cancel(self, reason: Optional[str] = None) -> None:
        """
        取消订单。

        Raises:
            BusinessRuleViolationException: 订单已送达或已取消
        """
        if self.status == OrderStatus.CANCELLED:
            raise BusinessRuleViolationException("Order.AlreadyCancelled", "订单已取消")
        if self.status == OrderStatus.DELIVERED:
            raise BusinessRuleViolationException("Order.InvalidStatus", "已送达的订单不能取消")
        self.status = OrderStatus.CANCELLED
        if reason:
            self.metadata["cancellationReason"] = reason
        self.add_domain_event(OrderCancelledEvent(self.id, reason))

    # ==================== 退款 ====================

    def refund(self, amount: Optional[Money] = None, reason: Optional[str] = None) -> Money:
        """
        对已支付订单退款。amount为空时退还全部剩余金额。
        累计退款达到订单总额时支付状态变为已退款。

        Args:
            amount: 退款金额
            reason: 退款原因

        Returns:
            本次退款金额

        Raises:
            BusinessRuleViolationException: 订单未支付或退款金额超过可退金额
            ValidationException: 退款金额为0
        """
        if not self.is_paid():
            raise BusinessRuleViolationException("Order.NotPaid", "只有已支付的订单可以退款")
        remaining = self.refundable_amount
        if amount is None:
            amount = remaining
        if amount.currency != self.currency:
            raise ValidationException("currency", f"退款币种必须为{self.currency}")
        if amount.amount <= Decimal("0"):
            raise ValidationException("amount", "退款金额必须大于0")
        if amount > remaining:
            raise BusinessRuleViolationException(
                "Order.RefundExceedsTotal", f"退款金额{amount}超过可退金额{remaining}"
            )

        self.refunded_amount = self.refunded_amount + amount
        self.refunded_at = utc_now()
        self.refund_reason = reason
        is_full = self.refunded_amount >= self.total
        if is_full:
            self.update_payment_status(PaymentStatus.REFUNDED)
        self.add_domain_event(OrderRefundedEvent(self.id, amount, is_full))
        return amount
