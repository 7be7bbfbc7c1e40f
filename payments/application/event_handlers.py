"""
支付领域事件处理器。
"""
from core.domain import DomainEvents
from core.infrastructure.cache import create_cache_service
from payments.domain.events import PaymentEvent, PaymentMethodEvent


def invalidate_payment_method_cache(event: PaymentMethodEvent) -> None:
    create_cache_service().delete(f"payment-methods:{event.user_id}")


def invalidate_order_cache(event: PaymentEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"order:{event.order_id}")
    cache.delete_pattern("orders:*")


def register_event_handlers() -> None:
    DomainEvents.register(PaymentMethodEvent, invalidate_payment_method_cache)
    DomainEvents.register(PaymentEvent, invalidate_order_cache)
