from sales.infrastructure.models.sales_models import CartItemModel, CartModel, OrderItemModel, OrderModel

__all__ = ['CartModel', 'CartItemModel', 'OrderModel', 'OrderItemModel']
