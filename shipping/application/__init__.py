from shipping.application.address_service import AddressApplicationService
from shipping.application.commands import (
    CreateAddressCommand,
    DeleteAddressCommand,
    SetDefaultAddressCommand,
    UpdateAddressCommand,
)
from shipping.application.dtos import AddressDTO

__all__ = [
    'AddressApplicationService',
    'AddressDTO',
    'CreateAddressCommand',
    'UpdateAddressCommand',
    'SetDefaultAddressCommand',
    'DeleteAddressCommand',
]
