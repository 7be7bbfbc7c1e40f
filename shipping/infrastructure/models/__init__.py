from shipping.infrastructure.models.shipping_models import AddressModel

__all__ = [
    'AddressModel',
]
