"""
购物车聚合根。
购物车可以属于登录用户，也可以是匿名购物车，之后再分配给用户。
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    Entity,
    EntityNotFoundException,
    ValidationException,
)
from catalog.domain import Product, ProductVariant
from sales.domain.events import (
    CartAssignedToUserEvent,
    CartClearedEvent,
    CartCreatedEvent,
    CartItemAddedEvent,
    CartItemRemovedEvent,
    CartItemUpdatedEvent,
)


class CartItem(Entity):
    """购物车商品项"""

    def __init__(
        self,
        id: Any = None,
        cart_id: Any = None,
        product_id: Any = None,
        variant_id: Any = None,
        quantity: int = 1,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at, updated_at)
        self.cart_id = cart_id
        self.product_id = product_id
        self.variant_id = variant_id
        self.quantity = quantity

    def matches(self, product_id: Any, variant_id: Any) -> bool:
        return (str(self.product_id) == str(product_id)
                and (str(self.variant_id) if self.variant_id else None) == (str(variant_id) if variant_id else None))


class Cart(AggregateRoot):
    """购物车聚合根"""

    def __init__(
        self,
        id: Any = None,
        user_id: Any = None,
        items: Optional[List[CartItem]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.user_id = user_id
        self._items: List[CartItem] = list(items or [])
        self.metadata = metadata or {}

    @classmethod
    def create(cls, user_id: Any = None, metadata: Optional[Dict[str, Any]] = None) -> 'Cart':
        """
        创建购物车，user_id为空时创建匿名购物车。
        """
        cart = cls(user_id=user_id, metadata=dict(metadata or {}))
        cart.add_domain_event(CartCreatedEvent(cart.id))
        return cart

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def belongs_to(self, user_id: Any) -> bool:
        return self.user_id is not None and str(self.user_id) == str(user_id)

    def get_item(self, item_id: Any) -> CartItem:
        """
        Raises:
            EntityNotFoundException: 商品项不在购物车中
        """
        item = next((i for i in self._items if str(i.id) == str(item_id)), None)
        if item is None:
            raise EntityNotFoundException("CartItem", item_id)
        return item

    def add_item(self, product: Product, quantity: int = 1, variant: Optional[ProductVariant] = None) -> CartItem:
        """
        添加商品到购物车，相同商品和变体的商品项合并数量。

        Args:
            product: 商品
            quantity: 数量，必须大于0
            variant: 商品变体，可选

        Returns:
            新增或合并后的商品项

        Raises:
            ValidationException: 数量无效
            BusinessRuleViolationException: 商品或变体已下架，或变体不属于该商品
        """
        if quantity <= 0:
            raise ValidationException("quantity", "数量必须大于0")
        if not product.is_active:
            raise BusinessRuleViolationException("Cart.ProductInactive", f"商品'{product.name}'已下架")
        if variant is not None:
            if str(variant.product_id) != str(product.id):
                raise BusinessRuleViolationException("Cart.VariantMismatch", "变体不属于该商品")
            if not variant.is_active:
                raise BusinessRuleViolationException("Cart.VariantInactive", "商品变体已停用")

        variant_id = variant.id if variant else None
        existing = next((i for i in self._items if i.matches(product.id, variant_id)), None)
        if existing:
            existing.quantity += quantity
            existing.touch()
            self.add_domain_event(CartItemUpdatedEvent(self.id, existing.id))
            return existing

        item = CartItem(cart_id=self.id, product_id=product.id, variant_id=variant_id, quantity=quantity)
        self._items.append(item)
        self.add_domain_event(CartItemAddedEvent(self.id, item.id))
        return item

    def update_item_quantity(self, item_id: Any, quantity: int) -> Optional[CartItem]:
        """
        修改商品项数量，数量小于等于0时移除该商品项。

        Returns:
            修改后的商品项，移除时返回None
        """
        item = self.get_item(item_id)
        if quantity <= 0:
            self.remove_item(item_id)
            return None
        if item.quantity != quantity:
            item.quantity = quantity
            item.touch()
            self.add_domain_event(CartItemUpdatedEvent(self.id, item.id))
        return item

    def remove_item(self, item_id: Any) -> None:
        item = self.get_item(item_id)
        self._items.remove(item)
        self.add_domain_event(CartItemRemovedEvent(self.id, item.id))

    def clear(self) -> None:
        self._items.clear()
        self.add_domain_event(CartClearedEvent(self.id))

    def assign_to_user(self, user_id: Any) -> None:
        """
        将购物车分配给用户。

        Raises:
            BusinessRuleViolationException: 购物车已属于其他用户
        """
        if user_id is None:
            raise ValidationException("user_id", "用户不能为空")
        if self.belongs_to(user_id):
            return
        if self.user_id is not None:
            raise BusinessRuleViolationException("Cart.AlreadyAssigned", "购物车已属于其他用户")
        self.user_id = user_id
        self.add_domain_event(CartAssignedToUserEvent(self.id, user_id))
