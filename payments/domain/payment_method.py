"""
支付方式聚合根。
保存用户在支付网关中的支付方式令牌，不保存完整卡号。
"""
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain import AggregateRoot, BusinessRuleViolationException, ValidationException, ValueObject, utc_now
from payments.domain.events import (
    DefaultPaymentMethodChangedEvent,
    PaymentMethodCreatedEvent,
    PaymentMethodDeletedEvent,
    PaymentMethodUpdatedEvent,
)
from payments.domain.payment import PaymentMethodType, PaymentProvider


class CardDetails(ValueObject):
    """银行卡信息值对象"""

    def __init__(self, brand: str, last_four: str, expiry_month: int, expiry_year: int):
        if not brand:
            raise ValidationException("card_brand", "卡品牌不能为空")
        last_four = str(last_four or "")
        if len(last_four) != 4 or not last_four.isdigit():
            raise ValidationException("last_four_digits", "卡号后四位必须是4位数字")
        expiry_month = int(expiry_month)
        expiry_year = int(expiry_year)
        if not 1 <= expiry_month <= 12:
            raise ValidationException("expiry_month", "有效期月份必须在1到12之间")
        self.brand = brand
        self.last_four = last_four
        self.expiry_month = expiry_month
        self.expiry_year = expiry_year

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return (self.expiry_year, self.expiry_month) < (now.year, now.month)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brand": self.brand,
            "last_four": self.last_four,
            "expiry_month": self.expiry_month,
            "expiry_year": self.expiry_year,
        }


class PaymentMethod(AggregateRoot):
    """支付方式聚合根"""

    def __init__(
        self,
        id: Any = None,
        user_id: Any = None,
        type: str = PaymentMethodType.CREDIT_CARD,
        provider: str = PaymentProvider.STRIPE,
        token: str = "",
        display_name: str = "",
        card_details: Optional[CardDetails] = None,
        is_default: bool = False,
        is_active: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.user_id = user_id
        self.type = type
        self.provider = provider
        self.token = token
        self.display_name = display_name
        self.card_details = card_details
        self.is_default = is_default
        self.is_active = is_active
        self.metadata = metadata or {}

    @staticmethod
    def _validate(user_id: Any, provider: str, token: str) -> None:
        if user_id is None:
            raise ValidationException("user_id", "用户不能为空")
        if provider not in PaymentProvider.ALL:
            raise ValidationException("provider", f"无效的支付网关: {provider}")
        if not token or not token.strip():
            raise ValidationException("token", "支付令牌不能为空")

    @classmethod
    def create_card(
        cls,
        user_id: Any,
        provider: str,
        token: str,
        card_details: CardDetails,
        is_default: bool = False,
        metadata: Optional[Dict[str, Any]] = None
    ) -> 'PaymentMethod':
        """
        创建银行卡支付方式。

        Raises:
            ValidationException: 参数无效
            BusinessRuleViolationException: 卡已过期
        """
        cls._validate(user_id, provider, token)
        if card_details is None:
            raise ValidationException("card_details", "银行卡信息不能为空")
        if card_details.is_expired():
            raise BusinessRuleViolationException("PaymentMethod.ExpiredCard", "银行卡已过期")
        method = cls(
            user_id=user_id,
            type=PaymentMethodType.CREDIT_CARD,
            provider=provider,
            token=token.strip(),
            display_name=f"{card_details.brand} ending in {card_details.last_four}",
            card_details=card_details,
            is_default=is_default,
            metadata=dict(metadata or {}),
        )
        method.add_domain_event(PaymentMethodCreatedEvent(method.id, user_id))
        return method

    @classmethod
    def create_paypal(
        cls,
        user_id: Any,
        token: str,
        email: str,
        is_default: bool = False,
        metadata: Optional[Dict[str, Any]] = None
    ) -> 'PaymentMethod':
        cls._validate(user_id, PaymentProvider.PAYPAL, token)
        if not email:
            raise ValidationException("email", "PayPal邮箱不能为空")
        metadata = dict(metadata or {})
        metadata["email"] = email
        method = cls(
            user_id=user_id,
            type=PaymentMethodType.PAYPAL,
            provider=PaymentProvider.PAYPAL,
            token=token.strip(),
            display_name=f"PayPal ({email})",
            is_default=is_default,
            metadata=metadata,
        )
        method.add_domain_event(PaymentMethodCreatedEvent(method.id, user_id))
        return method

    def belongs_to(self, user_id: Any) -> bool:
        return str(self.user_id) == str(user_id)

    def set_default(self, is_default: bool) -> None:
        if self.is_default == is_default:
            return
        self.is_default = is_default
        if is_default:
            self.add_domain_event(DefaultPaymentMethodChangedEvent(self.id, self.user_id))
        else:
            self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def activate(self) -> None:
        if not self.is_active:
            self.is_active = True
            self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def deactivate(self) -> None:
        if self.is_active:
            self.is_active = False
            self.is_default = False
            self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def update_token(self, token: str) -> None:
        if not token or not token.strip():
            raise ValidationException("token", "支付令牌不能为空")
        self.token = token.strip()
        self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def update_card_details(self, card_details: CardDetails) -> None:
        """
        Raises:
            BusinessRuleViolationException: 非银行卡支付方式或卡已过期
        """
        if self.type != PaymentMethodType.CREDIT_CARD:
            raise BusinessRuleViolationException("PaymentMethod.NotCard", "只有银行卡支付方式有卡信息")
        if card_details.is_expired():
            raise BusinessRuleViolationException("PaymentMethod.ExpiredCard", "银行卡已过期")
        self.card_details = card_details
        self.display_name = f"{card_details.brand} ending in {card_details.last_four}"
        self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def update_metadata(self, key: str, value: Any) -> None:
        if not key:
            raise ValidationException("metadata", "元数据键不能为空")
        super().update_metadata(key, value)
        self.add_domain_event(PaymentMethodUpdatedEvent(self.id, self.user_id))

    def mark_deleted(self) -> None:
        self.add_domain_event(PaymentMethodDeletedEvent(self.id, self.user_id))
