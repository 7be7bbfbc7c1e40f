"""
地址聚合根。
用户的收货/账单地址，每个用户在每种地址类型上最多有一个默认地址。
"""
from datetime import datetime
from typing import Any, Optional

from core.domain import AggregateRoot, PhoneNumber, PostalAddress, ValidationException
from shipping.domain.events import (
    AddressCreatedEvent,
    AddressDeletedEvent,
    AddressUpdatedEvent,
    DefaultAddressChangedEvent,
)


class AddressType:
    SHIPPING = "Shipping"
    BILLING = "Billing"
    BOTH = "Both"

    ALL = (SHIPPING, BILLING, BOTH)

    @classmethod
    def validate(cls, value: str) -> str:
        if value not in cls.ALL:
            raise ValidationException("address_type", f"无效的地址类型: {value}")
        return value

    @classmethod
    def overlaps(cls, first: str, second: str) -> bool:
        """两种地址类型是否有交集，Both与任意类型都有交集"""
        return first == second or cls.BOTH in (first, second)


class Address(AggregateRoot):
    """地址聚合根"""

    def __init__(
        self,
        id: Any = None,
        user_id: Any = None,
        postal_address: Optional[PostalAddress] = None,
        phone: Optional[PhoneNumber] = None,
        is_default: bool = False,
        address_type: str = AddressType.SHIPPING,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.user_id = user_id
        self.postal_address = postal_address
        self.phone = phone
        self.is_default = is_default
        self.address_type = address_type

    @classmethod
    def create(
        cls,
        user_id: Any,
        postal_address: PostalAddress,
        address_type: str = AddressType.SHIPPING,
        phone: Optional[str] = None,
        is_default: bool = False
    ) -> 'Address':
        """
        创建地址。

        Raises:
            ValidationException: 用户为空、地址类型或电话号码无效
        """
        if user_id is None:
            raise ValidationException("user_id", "用户不能为空")
        if postal_address is None:
            raise ValidationException("address_line1", "不能为空")
        address = cls(
            user_id=user_id,
            postal_address=postal_address,
            phone=PhoneNumber(phone) if phone else None,
            is_default=is_default,
            address_type=AddressType.validate(address_type),
        )
        address.add_domain_event(AddressCreatedEvent(address.id, user_id))
        return address

    def update(self, postal_address: PostalAddress, phone: Optional[str] = None,
               address_type: Optional[str] = None) -> None:
        if postal_address is None:
            raise ValidationException("address_line1", "不能为空")
        self.postal_address = postal_address
        self.phone = PhoneNumber(phone) if phone else None
        if address_type:
            self.address_type = AddressType.validate(address_type)
        self.add_domain_event(AddressUpdatedEvent(self.id, self.user_id))

    def set_default(self, is_default: bool) -> None:
        if self.is_default == is_default:
            return
        self.is_default = is_default
        if is_default:
            self.add_domain_event(DefaultAddressChangedEvent(self.id, self.user_id, self.address_type))
        self.add_domain_event(AddressUpdatedEvent(self.id, self.user_id))

    def overlaps(self, address_type: str) -> bool:
        return AddressType.overlaps(self.address_type, address_type)

    def serves(self, address_type: str) -> bool:
        """地址是否可用作指定类型"""
        return self.address_type == address_type or self.address_type == AddressType.BOTH

    def mark_deleted(self) -> None:
        self.add_domain_event(AddressDeletedEvent(self.id, self.user_id))
