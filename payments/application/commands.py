"""
支付应用服务层的命令对象。
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass
class ProcessOrderPaymentCommand:
    """使用已保存的支付方式支付订单"""
    order_id: Any
    user_id: Any
    payment_method_id: Any
    external_reference: Optional[str] = None


@dataclass
class RefundOrderCommand:
    """订单退款命令，amount为空时退还全部剩余金额"""
    order_id: Any
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ProcessWebhookCommand:
    provider: str
    payload: str
    signature: Optional[str] = None


@dataclass
class AddPaymentMethodCommand:
    """
    添加支付方式命令。
    银行卡需要提供卡信息，PayPal需要提供邮箱。
    """
    user_id: Any
    type: str
    provider: str
    token: str
    user_email: Optional[str] = None
    card_brand: Optional[str] = None
    last_four_digits: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    email: Optional[str] = None
    is_default: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SetDefaultPaymentMethodCommand:
    id: Any
    user_id: Any


@dataclass
class DeletePaymentMethodCommand:
    id: Any
    user_id: Any
