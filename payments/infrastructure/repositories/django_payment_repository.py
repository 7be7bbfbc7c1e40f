"""
基于Django ORM的支付记录仓储实现。
"""
from typing import Any, Dict, List, Optional

from core.domain import Money
from core.infrastructure.repositories import DjangoRepositoryMixin
from payments.domain import Payment, PaymentRepository, PaymentStatus
from payments.infrastructure.models import PaymentModel


class DjangoPaymentRepository(DjangoRepositoryMixin, PaymentRepository):

    model_class = PaymentModel
    entity_name = "Payment"

    def _to_domain(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            order_id=model.order_id,
            user_id=model.user_id,
            amount=Money(model.amount, model.currency),
            method_type=model.method_type,
            provider=model.provider,
            status=model.status,
            external_reference=model.external_reference,
            transaction_id=model.transaction_id,
            payment_method_id=model.payment_method_id,
            processed_at=model.processed_at,
            error_message=model.error_message,
            refunded_amount=Money(model.refunded_amount, model.currency),
            metadata=model.metadata,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, payment: Payment) -> Dict[str, Any]:
        return {
            "order_id": payment.order_id,
            "user_id": payment.user_id,
            "amount": payment.amount.amount,
            "currency": payment.amount.currency,
            "method_type": payment.method_type,
            "provider": payment.provider,
            "status": payment.status,
            "external_reference": payment.external_reference,
            "transaction_id": payment.transaction_id,
            "payment_method_id": payment.payment_method_id,
            "processed_at": payment.processed_at,
            "error_message": payment.error_message,
            "refunded_amount": payment.refunded_amount.amount,
            "metadata": payment.metadata,
        }

    def save(self, payment: Payment) -> Payment:
        self._persist(payment)
        self._dispatch_events(payment)
        return payment

    def get_by_order(self, order_id: Any) -> List[Payment]:
        queryset = PaymentModel.objects.filter(order_id=order_id).order_by("-created_at")
        return [self._to_domain(m) for m in queryset]

    def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        model = PaymentModel.objects.filter(transaction_id=transaction_id).first()
        return self._to_domain(model) if model else None

    def get_succeeded_by_order(self, order_id: Any) -> Optional[Payment]:
        model = PaymentModel.objects.filter(
            order_id=order_id, status__in=(PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED)
        ).order_by("-created_at").first()
        return self._to_domain(model) if model else None
