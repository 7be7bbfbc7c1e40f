"""
基于Django ORM的地址仓储实现。
"""
from typing import Any, Dict, List, Optional

from django.db.models import Q

from core.domain import PhoneNumber, PostalAddress
from core.infrastructure.repositories import DjangoRepositoryMixin
from shipping.domain import Address, AddressRepository, AddressType
from shipping.infrastructure.models import AddressModel


class DjangoAddressRepository(DjangoRepositoryMixin, AddressRepository):
    """
    基于Django ORM的地址仓储实现。
    """

    model_class = AddressModel
    entity_name = "Address"

    def _to_domain(self, model: AddressModel) -> Address:
        return Address(
            id=model.id,
            user_id=model.user_id,
            postal_address=PostalAddress(
                address_line1=model.address_line1,
                address_line2=model.address_line2,
                city=model.city,
                state=model.state,
                country=model.country,
                postal_code=model.postal_code,
            ),
            phone=PhoneNumber(model.phone) if model.phone else None,
            is_default=model.is_default,
            address_type=model.address_type,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, address: Address) -> Dict[str, Any]:
        return {
            "user_id": address.user_id,
            "phone": address.phone.value if address.phone else None,
            "is_default": address.is_default,
            "address_type": address.address_type,
            **address.postal_address.to_dict(),
        }

    def save(self, address: Address) -> Address:
        self._persist(address)
        self._dispatch_events(address)
        return address

    def get_by_user(self, user_id: Any) -> List[Address]:
        queryset = AddressModel.objects.filter(user_id=user_id).order_by("-is_default", "created_at")
        return [self._to_domain(m) for m in queryset]

    def get_default(self, user_id: Any, address_type: str) -> Optional[Address]:
        queryset = AddressModel.objects.filter(user_id=user_id, is_default=True)
        if address_type != AddressType.BOTH:
            queryset = queryset.filter(Q(address_type=address_type) | Q(address_type=AddressType.BOTH))
        model = queryset.order_by("-updated_at").first()
        return self._to_domain(model) if model else None

    def count_by_user(self, user_id: Any) -> int:
        return AddressModel.objects.filter(user_id=user_id).count()
