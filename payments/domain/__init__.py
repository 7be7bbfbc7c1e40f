"""
支付领域模型。
"""
from payments.domain.payment import Payment, PaymentMethodType, PaymentProvider, PaymentStatus
from payments.domain.exceptions import PaymentDeclinedException
from payments.domain.payment_method import CardDetails, PaymentMethod
from payments.domain.repositories import PaymentMethodRepository, PaymentRepository

__all__ = [
    'Payment',
    'PaymentStatus',
    'PaymentMethodType',
    'PaymentProvider',
    'PaymentMethod',
    'CardDetails',
    'PaymentDeclinedException',
    'PaymentRepository',
    'PaymentMethodRepository',
]
