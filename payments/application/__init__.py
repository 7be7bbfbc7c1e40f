"""
支付应用服务层。
"""
from payments.application.commands import (
    AddPaymentMethodCommand,
    DeletePaymentMethodCommand,
    ProcessOrderPaymentCommand,
    ProcessWebhookCommand,
    RefundOrderCommand,
    SetDefaultPaymentMethodCommand,
)
from payments.application.dtos import PaymentDTO, PaymentMethodDTO, RefundDTO
from payments.application.payment_method_service import PaymentMethodApplicationService
from payments.application.payment_service import PaymentApplicationService

__all__ = [
    'AddPaymentMethodCommand',
    'DeletePaymentMethodCommand',
    'ProcessOrderPaymentCommand',
    'ProcessWebhookCommand',
    'RefundOrderCommand',
    'SetDefaultPaymentMethodCommand',
    'PaymentDTO',
    'PaymentMethodDTO',
    'RefundDTO',
    'PaymentMethodApplicationService',
    'PaymentApplicationService',
]
