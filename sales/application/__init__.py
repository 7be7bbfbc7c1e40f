"""
销售应用服务层。
"""
from sales.application.cart_service import CartApplicationService
from sales.application.commands import (
    AddItemToCartCommand,
    AssignCartCommand,
    CancelOrderCommand,
    ClearCartCommand,
    CreateCartCommand,
    CreateOrderFromCartCommand,
    MarkOrderDeliveredCommand,
    MarkOrderShippedCommand,
    RemoveCartItemCommand,
    UpdateCartItemCommand,
    UpdateOrderStatusCommand,
)
from sales.application.dtos import CartDTO, CartItemDTO, OrderDTO, OrderItemDTO
from sales.application.order_service import OrderApplicationService

__all__ = [
    'CartApplicationService',
    'OrderApplicationService',
    'AddItemToCartCommand',
    'AssignCartCommand',
    'CancelOrderCommand',
    'ClearCartCommand',
    'CreateCartCommand',
    'CreateOrderFromCartCommand',
    'MarkOrderDeliveredCommand',
    'MarkOrderShippedCommand',
    'RemoveCartItemCommand',
    'UpdateCartItemCommand',
    'UpdateOrderStatusCommand',
    'CartDTO',
    'CartItemDTO',
    'OrderDTO',
    'OrderItemDTO',
]
