"""
支付领域异常。
"""
from core.domain.exceptions import DomainException


class PaymentDeclinedException(DomainException):
    """
    支付被拒绝异常。
    银行卡被拒、过期、余额不足等由用户输入导致的支付失败。
    """

    def __init__(self, message: str, code: str = "Payment.CardDeclined"):
        super().__init__(message, code=code)
