"""
销售应用服务层的数据传输对象(DTOs)。
"""
from typing import Any, Dict, List, Optional

from catalog.domain import Product, ProductVariant
from core.domain import Money
from sales.domain import Cart, CartItem, Order, OrderItem


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


class CartItemDTO:
    """购物车商品项DTO，价格按当前商品价格计算"""

    def __init__(self, item: CartItem, product: Optional[Product], variant: Optional[ProductVariant] = None):
        self.id = str(item.id)
        self.product_id = str(item.product_id)
        self.variant_id = str(item.variant_id) if item.variant_id else None
        self.quantity = item.quantity
        self.product_name = product.name if product else None
        self.sku = variant.sku if variant and variant.sku else (product.sku if product else None)
        self.unit_price: Optional[Money] = None
        if product is not None:
            self.unit_price = variant.effective_price(product.base_price) if variant else product.base_price
        self.total_price = self.unit_price * self.quantity if self.unit_price else None
        self.is_available = bool(product and product.is_active and (variant is None or variant.is_active))
        self.created_at = item.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unit_price": self.unit_price.to_dict() if self.unit_price else None,
            "total_price": self.total_price.to_dict() if self.total_price else None,
            "is_available": self.is_available,
            "created_at": _isoformat(self.created_at),
        }


class CartDTO:

    def __init__(self, cart: Cart, items: List[CartItemDTO], currency: str = Money.DEFAULT_CURRENCY):
        self.id = str(cart.id)
        self.user_id = str(cart.user_id) if cart.user_id else None
        self.items = items
        self.total_quantity = cart.total_quantity
        self.metadata = dict(cart.metadata)
        self.subtotal = Money.zero(currency)
        for item in items:
            if item.total_price is not None:
                self.subtotal = self.subtotal + item.total_price
        self.created_at = cart.created_at
        self.updated_at = cart.updated_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "total_items": self.total_quantity,
            "subtotal": self.subtotal.to_dict(),
            "metadata": self.metadata,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


class OrderItemDTO:

    def __init__(self, item: OrderItem):
        self.id = str(item.id)
        self.product_id = str(item.product_id)
        self.variant_id = str(item.variant_id) if item.variant_id else None
        self.quantity = item.quantity
        self.unit_price = item.unit_price
        self.total_price = item.total_price
        self.product_data = dict(item.product_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "product_name": self.product_data.get("name"),
            "quantity": self.quantity,
            "unit_price": self.unit_price.to_dict(),
            "total_price": self.total_price.to_dict(),
            "product_data": self.product_data,
        }


class OrderDTO:
    """订单DTO"""

    def __init__(self, order: Order):
        self.id = str(order.id)
        self.user_id = str(order.user_id) if order.user_id else None
        self.shipping_address_id = str(order.shipping_address_id) if order.shipping_address_id else None
        self.billing_address_id = str(order.billing_address_id) if order.billing_address_id else None
        self.shipping_address = order.shipping_address.to_dict() if order.shipping_address else None
        self.billing_address = order.billing_address.to_dict() if order.billing_address else None
        self.subtotal = order.subtotal
        self.tax = order.tax
        self.shipping_cost = order.shipping_cost
        self.total = order.total
        self.status = order.status
        self.payment_status = order.payment_status
        self.shipping_method = order.shipping_method
        self.payment_method_id = str(order.payment_method_id) if order.payment_method_id else None
        self.refunded_amount = order.refunded_amount
        self.refunded_at = order.refunded_at
        self.refund_reason = order.refund_reason
        self.metadata = dict(order.metadata)
        self.items = [OrderItemDTO(item) for item in order.items]
        self.created_at = order.created_at
        self.updated_at = order.updated_at

    @classmethod
    def from_domain(cls, order: Order) -> 'OrderDTO':
        return cls(order)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shipping_address_id": self.shipping_address_id,
            "billing_address_id": self.billing_address_id,
            "shipping_address": self.shipping_address,
            "billing_address": self.billing_address,
            "subtotal": self.subtotal.to_dict(),
            "tax": self.tax.to_dict(),
            "shipping_cost": self.shipping_cost.to_dict(),
            "total": self.total.to_dict(),
            "status": self.status,
            "payment_status": self.payment_status,
            "shipping_method": self.shipping_method,
            "payment_method_id": self.payment_method_id,
            "tracking_number": self.metadata.get("trackingNumber"),
            "refunded_amount": self.refunded_amount.to_dict(),
            "refunded_at": _isoformat(self.refunded_at),
            "refund_reason": self.refund_reason,
            "metadata": self.metadata,
            "items": [item.to_dict() for item in self.items],
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
