"""
销售领域事件处理器。
使购物车和订单缓存失效，并在订单发货时通知用户。
"""
from loguru import logger

from core.domain import DomainEvents
from core.infrastructure.cache import create_cache_service
from core.infrastructure.email import DjangoEmailService
from sales.domain.events import CartEvent, OrderEvent, OrderShippedEvent


def invalidate_cart_cache(event: CartEvent) -> None:
    create_cache_service().delete(f"cart:{event.cart_id}")


def invalidate_order_cache(event: OrderEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"order:{event.order_id}")
    cache.delete_pattern("orders:*")
    logger.debug(f"订单缓存已失效: {event.order_id}")


def notify_order_shipped(event: OrderShippedEvent) -> None:
    from identity.infrastructure.repositories import DjangoUserRepository
    from sales.infrastructure.repositories import DjangoOrderRepository

    order = DjangoOrderRepository().get_by_id(event.order_id)
    if order is None or order.user_id is None:
        return
    user = DjangoUserRepository().get_by_id(order.user_id)
    if user is None:
        return
    body = f"您的订单{order.id}已发货。"
    if event.tracking_number:
        body += f"运单号: {event.tracking_number}"
    DjangoEmailService().send_email(user.email.value, "订单已发货", body)


def register_event_handlers() -> None:
    """注册销售上下文的事件处理器，由SalesConfig.ready()调用"""
    DomainEvents.register(CartEvent, invalidate_cart_cache)
    DomainEvents.register(OrderEvent, invalidate_order_cache)
    DomainEvents.register(OrderShippedEvent, notify_order_shipped)
