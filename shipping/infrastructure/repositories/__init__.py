from shipping.infrastructure.repositories.django_address_repository import DjangoAddressRepository

__all__ = [
    'DjangoAddressRepository',
]
