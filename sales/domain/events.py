"""
购物车与订单领域事件。
"""
from typing import Any, Optional

from core.domain.events import DomainEvent


class CartEvent(DomainEvent):
    entity_type = "Cart"
    entity_id_field = "cart_id"

    def __init__(self, cart_id: Any):
        super().__init__()
        self.cart_id = cart_id


class CartCreatedEvent(CartEvent):
    """购物车创建事件"""


class CartItemAddedEvent(CartEvent):
    def __init__(self, cart_id: Any, item_id: Any):
        super().__init__(cart_id)
        self.item_id = item_id


class CartItemUpdatedEvent(CartItemAddedEvent):
    """购物车商品数量变更事件"""


class CartItemRemovedEvent(CartItemAddedEvent):
    """购物车商品移除事件"""


class CartClearedEvent(CartEvent):
    """购物车清空事件"""


class CartAssignedToUserEvent(CartEvent):
    def __init__(self, cart_id: Any, user_id: Any):
        super().__init__(cart_id)
        self.user_id = user_id


class OrderEvent(DomainEvent):
    entity_type = "Order"
    entity_id_field = "order_id"

    def __init__(self, order_id: Any):
        super().__init__()
        self.order_id = order_id


class OrderCreatedEvent(OrderEvent):
    """订单创建事件"""


class OrderStatusChangedEvent(OrderEvent):
    """订单状态变更事件"""

    def __init__(self, order_id: Any, old_status: str, new_status: str):
        super().__init__(order_id)
        self.old_status = old_status
        self.new_status = new_status


class OrderPaymentStatusChangedEvent(OrderStatusChangedEvent):
    """订单支付状态变更事件"""


class OrderPaidEvent(OrderEvent):
    """订单支付完成事件"""


class OrderShippedEvent(OrderEvent):
    def __init__(self, order_id: Any, tracking_number: Optional[str] = None):
        super().__init__(order_id)
        self.tracking_number = tracking_number


class OrderDeliveredEvent(OrderEvent):
    """订单送达事件"""


class OrderCancelledEvent(OrderEvent):
    def __init__(self, order_id: Any, reason: Optional[str] = None):
        super().__init__(order_id)
        self.reason = reason


class OrderRefundedEvent(OrderEvent):
    """订单退款事件，amount为本次退款金额"""

    def __init__(self, order_id: Any, amount: Any, is_full: bool):
        super().__init__(order_id)
        self.amount = amount
        self.is_full = is_full
