"""
购物车与订单领域模型。
"""
from sales.domain.cart import Cart, CartItem
from sales.domain.order import Order, OrderItem, OrderStatus
from sales.domain.repositories import CartRepository, OrderRepository

__all__ = [
    'Cart',
    'CartItem',
    'Order',
    'OrderItem',
    'OrderStatus',
    'CartRepository',
    'OrderRepository',
]
