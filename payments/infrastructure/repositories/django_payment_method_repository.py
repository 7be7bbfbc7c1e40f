"""
基于Django ORM的支付方式仓储实现。
"""
from typing import Any, Dict, List, Optional

from core.infrastructure.repositories import DjangoRepositoryMixin
from payments.domain import CardDetails, PaymentMethod, PaymentMethodRepository
from payments.infrastructure.models import PaymentMethodModel


class DjangoPaymentMethodRepository(DjangoRepositoryMixin, PaymentMethodRepository):

    model_class = PaymentMethodModel
    entity_name = "PaymentMethod"

    def _to_domain(self, model: PaymentMethodModel) -> PaymentMethod:
        card_details = None
        if model.card_brand and model.last_four_digits:
            card_details = CardDetails(model.card_brand, model.last_four_digits, model.expiry_month, model.expiry_year)
        return PaymentMethod(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            provider=model.provider,
            token=model.token,
            display_name=model.display_name,
            card_details=card_details,
            is_default=model.is_default,
            is_active=model.is_active,
            metadata=model.metadata,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, method: PaymentMethod) -> Dict[str, Any]:
        card = method.card_details
        return {
            "user_id": method.user_id,
            "type": method.type,
            "provider": method.provider,
            "token": method.token,
            "display_name": method.display_name,
            "card_brand": card.brand if card else None,
            "last_four_digits": card.last_four if card else None,
            "expiry_month": card.expiry_month if card else None,
            "expiry_year": card.expiry_year if card else None,
            "is_default": method.is_default,
            "is_active": method.is_active,
            "metadata": method.metadata,
        }

    def save(self, method: PaymentMethod) -> PaymentMethod:
        self._persist(method)
        self._dispatch_events(method)
        return method

    def get_by_user(self, user_id: Any) -> List[PaymentMethod]:
        queryset = PaymentMethodModel.objects.filter(user_id=user_id).order_by("-is_default", "created_at")
        return [self._to_domain(m) for m in queryset]

    def get_default(self, user_id: Any) -> Optional[PaymentMethod]:
        model = PaymentMethodModel.objects.filter(user_id=user_id, is_default=True, is_active=True).first()
        return self._to_domain(model) if model else None

    def token_exists(self, user_id: Any, token: str) -> bool:
        return PaymentMethodModel.objects.filter(user_id=user_id, token=token).exists()
