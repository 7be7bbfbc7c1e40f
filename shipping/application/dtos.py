"""
配送应用服务层的数据传输对象(DTOs)。
"""
from typing import Any, Dict

from shipping.domain import Address


class AddressDTO:
    """地址DTO"""

    def __init__(self, address: Address):
        self.id = str(address.id)
        self.user_id = str(address.user_id)
        self.postal_address = address.postal_address.to_dict()
        self.phone = address.phone.value if address.phone else None
        self.is_default = address.is_default
        self.address_type = address.address_type
        self.created_at = address.created_at
        self.updated_at = address.updated_at

    @classmethod
    def from_domain(cls, address: Address) -> 'AddressDTO':
        return cls(address)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            **self.postal_address,
            "phone": self.phone,
            "is_default": self.is_default,
            "address_type": self.address_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
