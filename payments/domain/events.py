"""
支付领域事件。
"""
from typing import Any, Optional

from core.domain.events import DomainEvent


class PaymentEvent(DomainEvent):
    entity_type = "Payment"
    entity_id_field = "payment_id"

    def __init__(self, payment_id: Any, order_id: Any):
        super().__init__()
        self.payment_id = payment_id
        self.order_id = order_id


class PaymentCreatedEvent(PaymentEvent):
    """支付记录创建事件"""


class PaymentStatusChangedEvent(PaymentEvent):
    def __init__(self, payment_id: Any, order_id: Any, old_status: str, new_status: str):
        super().__init__(payment_id, order_id)
        self.old_status = old_status
        self.new_status = new_status


class PaymentSucceededEvent(PaymentEvent):
    """支付成功事件"""


class PaymentFailedEvent(PaymentEvent):
    def __init__(self, payment_id: Any, order_id: Any, error_message: Optional[str] = None):
        super().__init__(payment_id, order_id)
        self.error_message = error_message


class PaymentRefundedEvent(PaymentEvent):
    """支付全额退款事件"""


class PaymentMethodEvent(DomainEvent):
    entity_type = "PaymentMethod"
    entity_id_field = "payment_method_id"

    def __init__(self, payment_method_id: Any, user_id: Any):
        super().__init__()
        self.payment_method_id = payment_method_id
        self.user_id = user_id


class PaymentMethodCreatedEvent(PaymentMethodEvent):
    """支付方式添加事件"""


class PaymentMethodUpdatedEvent(PaymentMethodEvent):
    """支付方式更新事件"""


class DefaultPaymentMethodChangedEvent(PaymentMethodEvent):
    """默认支付方式变更事件"""


class PaymentMethodDeletedEvent(PaymentMethodEvent):
    """支付方式删除事件"""
