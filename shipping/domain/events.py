"""
配送领域事件。
"""
from typing import Any

from core.domain.events import DomainEvent


class AddressEvent(DomainEvent):
    entity_type = "Address"
    entity_id_field = "address_id"

    def __init__(self, address_id: Any, user_id: Any):
        super().__init__()
        self.address_id = address_id
        self.user_id = user_id


class AddressCreatedEvent(AddressEvent):
    """地址创建事件"""


class AddressUpdatedEvent(AddressEvent):
    """地址更新事件"""


class AddressDeletedEvent(AddressEvent):
    """地址删除事件"""


class DefaultAddressChangedEvent(AddressEvent):
    """默认地址变更事件"""

    def __init__(self, address_id: Any, user_id: Any, address_type: str):
        super().__init__(address_id, user_id)
        self.address_type = address_type
