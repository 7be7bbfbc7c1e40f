from sales.infrastructure.repositories.django_cart_repository import DjangoCartRepository
from sales.infrastructure.repositories.django_order_repository import DjangoOrderRepository

__all__ = ['DjangoCartRepository', 'DjangoOrderRepository']
