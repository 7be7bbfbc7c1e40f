"""
基于Django ORM的购物车仓储实现。
"""
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import QuerySet

from core.infrastructure.repositories import DjangoRepositoryMixin
from sales.domain import Cart, CartItem, CartRepository
from sales.infrastructure.models import CartItemModel, CartModel


class DjangoCartRepository(DjangoRepositoryMixin, CartRepository):

    model_class = CartModel
    entity_name = "Cart"

    def _queryset(self) -> QuerySet:
        return CartModel.objects.prefetch_related("items")

    def _to_domain(self, model: CartModel) -> Cart:
        items = [
            CartItem(
                id=item.id,
                cart_id=model.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                created_at=item.created_at,
                updated_at=item.updated_at,
            )
            for item in sorted(model.items.all(), key=lambda i: i.created_at)
        ]
        return Cart(
            id=model.id,
            user_id=model.user_id,
            items=items,
            metadata=model.metadata,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, cart: Cart) -> Dict[str, Any]:
        return {"user_id": cart.user_id, "metadata": cart.metadata}

    @staticmethod
    def _item_values(item: CartItem) -> Dict[str, Any]:
        return {
            "product_id": item.product_id,
            "variant_id": item.variant_id,
            "quantity": item.quantity,
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }

    def save(self, cart: Cart) -> Cart:
        with transaction.atomic():
            self._persist(cart)
            self._sync_children(CartItemModel, {"cart_id": cart.id}, cart.items, self._item_values)
            self._dispatch_events(cart)
        return cart

    def get_by_id(self, id: Any) -> Optional[Cart]:
        model = self._queryset().filter(pk=id).first()
        return self._to_domain(model) if model else None

    def get_by_user(self, user_id: Any) -> Optional[Cart]:
        model = self._queryset().filter(user_id=user_id).order_by("-updated_at").first()
        return self._to_domain(model) if model else None
