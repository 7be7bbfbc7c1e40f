"""
基于Django ORM的订单仓储实现。
"""
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import QuerySet
from loguru import logger

from core.application.pagination import DataTableRequest
from core.domain import Money, PostalAddress
from core.infrastructure.repositories import DjangoRepositoryMixin, apply_datatable, paginate_queryset
from sales.domain import Order, OrderItem, OrderRepository
from sales.infrastructure.models import OrderItemModel, OrderModel


class DjangoOrderRepository(DjangoRepositoryMixin, OrderRepository):
    """
    基于Django ORM的订单仓储实现。
    """

    model_class = OrderModel
    entity_name = "Order"

    DATATABLE_COLUMNS = {
        "id": "id",
        "status": "status",
        "payment_status": "payment_status",
        "total": "total",
        "shipping_method": "shipping_method",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    def _queryset(self) -> QuerySet:
        return OrderModel.objects.prefetch_related("items")

    def _to_domain(self, model: OrderModel) -> Order:
        currency = model.currency
        items = [
            OrderItem(
                id=item.id,
                order_id=model.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=Money(item.unit_price, item.currency),
                total_price=Money(item.total_price, item.currency),
                product_data=item.product_data,
                created_at=item.created_at,
                updated_at=item.updated_at,
            )
            for item in sorted(model.items.all(), key=lambda i: i.created_at)
        ]
        return Order(
            id=model.id,
            user_id=model.user_id,
            shipping_address_id=model.shipping_address_id,
            billing_address_id=model.billing_address_id,
            shipping_address=PostalAddress.from_dict(model.shipping_address),
            billing_address=PostalAddress.from_dict(model.billing_address),
            subtotal=Money(model.subtotal, currency),
            tax=Money(model.tax, currency),
            shipping_cost=Money(model.shipping_cost, currency),
            status=model.status,
            payment_status=model.payment_status,
            shipping_method=model.shipping_method,
            payment_method_id=model.payment_method_id,
            refunded_amount=Money(model.refunded_amount, currency),
            refunded_at=model.refunded_at,
            refund_reason=model.refund_reason,
            metadata=model.metadata,
            items=items,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, order: Order) -> Dict[str, Any]:
        return {
            "user_id": order.user_id,
            "shipping_address_id": order.shipping_address_id,
            "billing_address_id": order.billing_address_id,
            "shipping_address": order.shipping_address.to_dict(),
            "billing_address": order.billing_address.to_dict(),
            "currency": order.currency,
            "subtotal": order.subtotal.amount,
            "tax": order.tax.amount,
            "shipping_cost": order.shipping_cost.amount,
            "total": order.total.amount,
            "status": order.status,
            "payment_status": order.payment_status,
            "shipping_method": order.shipping_method,
            "payment_method_id": order.payment_method_id,
            "refunded_amount": order.refunded_amount.amount,
            "refunded_at": order.refunded_at,
            "refund_reason": order.refund_reason,
            "metadata": order.metadata,
        }

    @staticmethod
    def _item_values(item: OrderItem) -> Dict[str, Any]:
        return {
            "product_id": item.product_id,
            "variant_id": item.variant_id,
            "quantity": item.quantity,
            "unit_price": item.unit_price.amount,
            "total_price": item.total_price.amount,
            "currency": item.unit_price.currency,
            "product_data": item.product_data,
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }

    def save(self, order: Order) -> Order:
        """
        保存订单及其商品项。

        Raises:
            ConcurrencyException: 版本冲突
        """
        with transaction.atomic():
            self._persist(order)
            self._sync_children(OrderItemModel, {"order_id": order.id}, order.items, self._item_values)
            self._dispatch_events(order)
        logger.debug(f"订单已保存: {order.id} v{order.version}")
        return order

    def get_by_id(self, id: Any) -> Optional[Order]:
        model = self._queryset().filter(pk=id).first()
        return self._to_domain(model) if model else None

    def _load(self, ids: List[Any]) -> List[Order]:
        by_id = {m.id: m for m in self._queryset().filter(pk__in=ids)}
        return [self._to_domain(by_id[i]) for i in ids if i in by_id]

    def get_by_user(self, user_id: Any, page: int = 1, page_size: int = 20) -> Tuple[List[Order], int]:
        queryset = OrderModel.objects.filter(user_id=user_id).order_by("-created_at", "id")
        models, total = paginate_queryset(queryset, page, page_size)
        return self._load([m.id for m in models]), total

    def get_recent(self, count: int = 10) -> List[Order]:
        ids = list(OrderModel.objects.order_by("-created_at").values_list("id", flat=True)[:count])
        return self._load(ids)

    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[Order], int]:
        queryset = OrderModel.objects.all()
        if filters.get("status"):
            queryset = queryset.filter(status=filters["status"])
        if filters.get("user_id"):
            queryset = queryset.filter(user_id=filters["user_id"])
        models, total = paginate_queryset(queryset.order_by("-created_at", "id"), page, page_size)
        return self._load([m.id for m in models]), total

    def datatable(self, request: DataTableRequest) -> Tuple[List[Order], int, int]:
        models, total, filtered = apply_datatable(
            OrderModel.objects.all(),
            request,
            search_fields=("status", "payment_status", "shipping_method", "user__email"),
            column_map=self.DATATABLE_COLUMNS,
        )
        return self._load([m.id for m in models]), total, filtered
