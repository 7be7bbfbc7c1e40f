"""
配送领域事件处理器。
"""
from core.domain import DomainEvents
from core.infrastructure.cache import create_cache_service
from shipping.domain.events import AddressEvent


def invalidate_address_cache(event: AddressEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"address:{event.address_id}")
    cache.delete_pattern(f"address:user:{event.user_id}*")


def register_event_handlers() -> None:
    DomainEvents.register(AddressEvent, invalidate_address_cache)
