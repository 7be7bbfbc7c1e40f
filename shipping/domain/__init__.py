"""
配送领域模型包。
包含地址聚合根、领域事件和仓储接口。
"""
from shipping.domain.address import Address, AddressType
from shipping.domain.events import (
    AddressEvent,
    AddressCreatedEvent,
    AddressUpdatedEvent,
    AddressDeletedEvent,
    DefaultAddressChangedEvent,
)
from shipping.domain.repositories import AddressRepository

__all__ = [
    'Address',
    'AddressType',
    'AddressEvent',
    'AddressCreatedEvent',
    'AddressUpdatedEvent',
    'AddressDeletedEvent',
    'DefaultAddressChangedEvent',
    'AddressRepository',
]
