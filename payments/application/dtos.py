"""
支付应用服务层的数据传输对象(DTOs)。
"""
from typing import Any, Dict, Optional

from payments.domain import Payment, PaymentMethod


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


class PaymentDTO:
    """支付记录DTO，需要进一步验证时附带client_secret"""

    def __init__(self, payment: Payment, client_secret: Optional[str] = None,
                 requires_action: bool = False, next_action_type: Optional[str] = None):
        self.id = str(payment.id)
        self.order_id = str(payment.order_id)
        self.user_id = str(payment.user_id) if payment.user_id else None
        self.amount = payment.amount
        self.refunded_amount = payment.refunded_amount
        self.method_type = payment.method_type
        self.provider = payment.provider
        self.status = payment.status
        self.external_reference = payment.external_reference
        self.transaction_id = payment.transaction_id
        self.payment_method_id = str(payment.payment_method_id) if payment.payment_method_id else None
        self.processed_at = payment.processed_at
        self.error_message = payment.error_message
        self.metadata = dict(payment.metadata)
        self.client_secret = client_secret
        self.requires_action = requires_action
        self.next_action_type = next_action_type
        self.created_at = payment.created_at
        self.updated_at = payment.updated_at

    @classmethod
    def from_domain(cls, payment: Payment, **extra: Any) -> 'PaymentDTO':
        return cls(payment, **extra)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "user_id": self.user_id,
            "amount": self.amount.to_dict(),
            "refunded_amount": self.refunded_amount.to_dict(),
            "method_type": self.method_type,
            "provider": self.provider,
            "status": self.status,
            "external_reference": self.external_reference,
            "transaction_id": self.transaction_id,
            "payment_method_id": self.payment_method_id,
            "processed_at": _isoformat(self.processed_at),
            "error_message": self.error_message,
            "metadata": self.metadata,
            "client_secret": self.client_secret,
            "requires_action": self.requires_action,
            "next_action_type": self.next_action_type,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


class RefundDTO:
    """退款结果"""

    def __init__(self, order_id: Any, payment_id: Any, refund_id: str, amount, refunded_total,
                 payment_status: str, is_full: bool, reason: Optional[str] = None):
        self.order_id = str(order_id)
        self.payment_id = str(payment_id)
        self.refund_id = refund_id
        self.amount = amount
        self.refunded_total = refunded_total
        self.payment_status = payment_status
        self.is_full = is_full
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order_id,
            "payment_id": self.payment_id,
            "refund_id": self.refund_id,
            "amount": self.amount.to_dict(),
            "refunded_total": self.refunded_total.to_dict(),
            "payment_status": self.payment_status,
            "is_full": self.is_full,
            "reason": self.reason,
        }


class PaymentMethodDTO:
    """支付方式DTO，不包含支付令牌"""

    def __init__(self, method: PaymentMethod):
        self.id = str(method.id)
        self.user_id = str(method.user_id)
        self.type = method.type
        self.provider = method.provider
        self.display_name = method.display_name
        self.card_details = method.card_details.to_dict() if method.card_details else None
        self.is_default = method.is_default
        self.is_active = method.is_active
        self.metadata = {k: v for k, v in method.metadata.items() if k != "stripe_customer_id"}
        self.created_at = method.created_at
        self.updated_at = method.updated_at

    @classmethod
    def from_domain(cls, method: PaymentMethod) -> 'PaymentMethodDTO':
        return cls(method)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "provider": self.provider,
            "display_name": self.display_name,
            "card_details": self.card_details,
            "is_default": self.is_default,
            "is_active": self.is_active,
            "metadata": self.metadata,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
