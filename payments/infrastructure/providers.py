"""
支付网关模块。
提供支付网关接口以及基于Stripe SDK的实现。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import json
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from loguru import logger
import stripe

from core.domain import Money, ValidationException
from core.domain.exceptions import ExternalServiceException
from payments.domain import PaymentDeclinedException, PaymentStatus

STRIPE_STATUS_MAP = {
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.REQUIRES_CONFIRMATION,
    "requires_action": PaymentStatus.REQUIRES_ACTION,
    "processing": PaymentStatus.PROCESSING,
    "succeeded": PaymentStatus.SUCCEEDED,
    "canceled": PaymentStatus.CANCELED,
}

REFUND_REASONS = ("duplicate", "fraudulent", "requested_by_customer")

CARD_ERROR_MESSAGES = {
    "card_declined": ("Payment.CardDeclined", "银行卡被拒绝"),
    "expired_card": ("Payment.ExpiredCard", "银行卡已过期"),
    "insufficient_funds": ("Payment.InsufficientFunds", "余额不足"),
    "incorrect_cvc": ("Payment.InvalidCard", "安全码错误"),
    "invalid_cvc": ("Payment.InvalidCard", "安全码无效"),
    "incorrect_number": ("Payment.InvalidCard", "卡号错误"),
    "invalid_number": ("Payment.InvalidCard", "卡号无效"),
    "invalid_expiry_month": ("Payment.InvalidCard", "有效期月份无效"),
    "invalid_expiry_year": ("Payment.InvalidCard", "有效期年份无效"),
    "processing_error": ("Payment.ProcessingFailed", "支付处理出错，请稍后重试"),
    "authentication_required": ("Payment.AuthenticationRequired", "需要进行身份验证"),
}

DECLINE_CODE_MESSAGES = {
    "insufficient_funds": ("Payment.InsufficientFunds", "余额不足"),
    "fraudulent": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "stolen_card": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "lost_card": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "pickup_card": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "restricted_card": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "security_violation": ("Payment.FraudSuspected", "疑似欺诈交易"),
    "expired_card": ("Payment.ExpiredCard", "银行卡已过期"),
    "incorrect_cvc": ("Payment.InvalidCard", "安全码错误"),
    "issuer_not_available": ("Payment.ProcessingFailed", "发卡行暂时不可用"),
    "try_again_later": ("Payment.ProcessingFailed", "请稍后重试"),
}


def convert_stripe_status(status: Optional[str]) -> str:
    """将Stripe的PaymentIntent状态转换为支付状态，未知状态视为失败"""
    return STRIPE_STATUS_MAP.get(status, PaymentStatus.FAILED)


def convert_refund_reason(reason: Optional[str]) -> str:
    return reason if reason in REFUND_REASONS else "requested_by_customer"


def to_minor_units(amount: Money) -> int:
    return int((amount.amount * 100).to_integral_value())


@dataclass
class PaymentResult:
    """支付网关的扣款结果"""
    transaction_id: str
    status: str
    client_secret: Optional[str] = None
    requires_action: bool = False
    next_action_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WebhookResult:
    """解析后的支付网关回调事件"""
    event_id: str
    event_type: str
    transaction_id: Optional[str] = None
    payment_status: Optional[str] = None
    customer_id: Optional[str] = None
    order_id: Optional[str] = None
    event_data: Dict[str, Any] = field(default_factory=dict)
    processing_message: Optional[str] = None
    is_processed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "transaction_id": self.transaction_id,
            "payment_status": self.payment_status,
            "customer_id": self.customer_id,
            "order_id": self.order_id,
            "event_data": self.event_data,
            "processing_message": self.processing_message,
            "is_processed": self.is_processed,
        }


class PaymentProviderService(ABC):
    """支付网关接口"""

    provider_name: str = ""

    @abstractmethod
    def process_payment(self, amount: Money, payment_method_token: str, customer_id: Optional[str] = None,
                        metadata: Optional[Dict[str, str]] = None) -> PaymentResult:
        """
        发起扣款。

        Args:
            amount: 扣款金额
            payment_method_token: 网关中的支付方式令牌
            customer_id: 网关中的客户ID
            metadata: 附加在交易上的元数据

        Returns:
            扣款结果

        Raises:
            PaymentDeclinedException: 银行卡被拒绝
            ExternalServiceException: 网关调用失败
        """
        pass

    @abstractmethod
    def refund_payment(self, transaction_id: str, amount: Optional[Money] = None,
                       reason: Optional[str] = None) -> str:
        """
        退款，amount为空时全额退款。

        Returns:
            退款ID
        """
        pass

    @abstractmethod
    def create_customer(self, user_id: Any, email: str, metadata: Optional[Dict[str, str]] = None) -> str:
        pass

    @abstractmethod
    def attach_payment_method(self, payment_method_token: str, customer_id: str) -> str:
        pass

    @abstractmethod
    def process_webhook(self, payload: str, signature: Optional[str] = None) -> WebhookResult:
        """
        校验并解析回调事件。

        Raises:
            ValidationException: 签名无效或内容无法解析
        """
        pass


class StripePaymentProvider(PaymentProviderService):
    """
    基于Stripe SDK的支付网关实现。
    API密钥通过每次调用的api_key参数传入，不修改SDK的全局配置。
    """

    provider_name = "Stripe"

    def __init__(self, secret_key: str, webhook_secret: Optional[str] = None,
                 api_version: Optional[str] = None, return_url: Optional[str] = None):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.api_version = api_version
        self.return_url = return_url

    @classmethod
    def from_settings(cls, options: Dict[str, Any]) -> 'StripePaymentProvider':
        return cls(
            secret_key=options.get("SECRET_KEY", ""),
            webhook_secret=options.get("WEBHOOK_SECRET") or None,
            api_version=options.get("API_VERSION") or None,
            return_url=options.get("RETURN_URL") or None,
        )

    def _request_options(self) -> Dict[str, Any]:
        options = {"api_key": self.secret_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    def _call(self, operation: str, func: Callable[..., Any], **params: Any) -> Any:
        """
        调用Stripe SDK并转换异常。

        Raises:
            PaymentDeclinedException: 银行卡错误
            ExternalServiceException: 其他Stripe错误
        """
        try:
            return func(**params, **self._request_options())
        except stripe.CardError as e:
            logger.warning(f"Stripe{operation}被拒绝: code={e.code} {e.user_message}")
            raise self._card_error(e)
        except stripe.StripeError as e:
            logger.error(f"Stripe{operation}失败: {type(e).__name__}: {e.user_message or e}")
            raise ExternalServiceException(
                "Stripe", e.user_message or str(e), code="Payment.ProcessingFailed"
            )

    @staticmethod
    def _card_error(error: stripe.CardError) -> PaymentDeclinedException:
        code = error.code
        if code == "card_declined":
            decline_code = getattr(error.error, "decline_code", None) if error.error else None
            if decline_code in DECLINE_CODE_MESSAGES:
                return PaymentDeclinedException(*reversed(DECLINE_CODE_MESSAGES[decline_code]))
        error_code, message = CARD_ERROR_MESSAGES.get(
            code, ("Payment.CardDeclined", error.user_message or "银行卡被拒绝")
        )
        return PaymentDeclinedException(message, code=error_code)

    def process_payment(self, amount: Money, payment_method_token: str, customer_id: Optional[str] = None,
                        metadata: Optional[Dict[str, str]] = None) -> PaymentResult:
        params = {
            "amount": to_minor_units(amount),
            "currency": amount.currency.lower(),
            "payment_method": payment_method_token,
            "confirm": True,
            "metadata": dict(metadata or {}),
            "payment_method_options": {"card": {"request_three_d_secure": "automatic"}},
        }
        if customer_id:
            params["customer"] = customer_id
        if self.return_url:
            params["return_url"] = self.return_url
        logger.info(f"发起Stripe扣款: {amount}")
        intent = self._call("扣款", stripe.PaymentIntent.create, **params)

        next_action = intent.get("next_action") or {}
        status = convert_stripe_status(intent.get("status"))
        logger.info(f"Stripe PaymentIntent已创建: {intent['id']} 状态={intent.get('status')}")
        return PaymentResult(
            transaction_id=intent["id"],
            status=status,
            client_secret=intent.get("client_secret"),
            requires_action=status == PaymentStatus.REQUIRES_ACTION,
            next_action_type=next_action.get("type") if next_action else None,
            metadata={"stripe_status": intent.get("status")},
        )

    def refund_payment(self, transaction_id: str, amount: Optional[Money] = None,
                       reason: Optional[str] = None) -> str:
        params = {"payment_intent": transaction_id, "reason": convert_refund_reason(reason)}
        if amount is not None:
            params["amount"] = to_minor_units(amount)
        refund = self._call("退款", stripe.Refund.create, **params)
        logger.info(f"Stripe退款已创建: {refund['id']}")
        return refund["id"]

    def create_customer(self, user_id: Any, email: str, metadata: Optional[Dict[str, str]] = None) -> str:
        customer_metadata = {"userId": str(user_id), **(metadata or {})}
        customer = self._call("创建客户", stripe.Customer.create, email=email, metadata=customer_metadata)
        return customer["id"]

    def attach_payment_method(self, payment_method_token: str, customer_id: str) -> str:
        method = self._call(
            "绑定支付方式", stripe.PaymentMethod.attach, payment_method=payment_method_token, customer=customer_id
        )
        return method["id"]

    # ==================== 回调 ====================

    def _parse_event(self, payload: str, signature: Optional[str]) -> Dict[str, Any]:
        if self.webhook_secret:
            try:
                # 签名校验
                stripe.Webhook.construct_event(payload, signature or "", self.webhook_secret)
            except stripe.SignatureVerificationError:
                raise ValidationException("signature", "回调签名无效")
            except ValueError:
                raise ValidationException("payload", "回调内容无效")
        try:
            event = json.loads(payload)
        except (TypeError, ValueError):
            raise ValidationException("payload", "回调内容无效")
        if not isinstance(event, dict) or "id" not in event or "type" not in event:
            raise ValidationException("payload", "回调内容缺少事件ID或类型")
        return event

    def process_webhook(self, payload: str, signature: Optional[str] = None) -> WebhookResult:
        event = self._parse_event(payload, signature)
        result = WebhookResult(event_id=event["id"], event_type=event["type"])
        obj = (event.get("data") or {}).get("object") or {}
        handler = self._webhook_handlers().get(event["type"])
        logger.info(f"处理Stripe回调: {event['type']} {event['id']}")
        if handler is None:
            result.processing_message = f"未处理的事件类型: {event['type']}"
            result.is_processed = True
            return result
        handler(obj, result)
        return result

    def _webhook_handlers(self) -> Dict[str, Callable[[Dict[str, Any], WebhookResult], None]]:
        return {
            "payment_intent.succeeded": self._on_intent_succeeded,
            "payment_intent.payment_failed": self._on_intent_failed,
            "payment_intent.requires_action": self._on_intent_requires_action,
            "payment_intent.canceled": self._on_intent_canceled,
            "charge.succeeded": self._on_charge_succeeded,
            "charge.dispute.created": self._on_dispute_created,
            "customer.created": self._on_customer_event,
            "customer.updated": self._on_customer_event,
            "payment_method.attached": self._on_payment_method_attached,
        }

    @staticmethod
    def _apply_intent(obj: Dict[str, Any], result: WebhookResult, status: str, message: str) -> None:
        metadata = obj.get("metadata") or {}
        result.transaction_id = obj.get("id")
        result.payment_status = status
        result.customer_id = obj.get("customer")
        result.order_id = metadata.get("orderId")
        if metadata:
            result.event_data["metadata"] = metadata
        result.processing_message = message
        result.is_processed = True

    def _on_intent_succeeded(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        result.event_data.update({
            "amount": obj.get("amount"),
            "currency": obj.get("currency"),
            "payment_method": obj.get("payment_method"),
        })
        self._apply_intent(obj, result, PaymentStatus.SUCCEEDED, "支付成功")

    def _on_intent_failed(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        error = (obj.get("last_payment_error") or {}).get("message") or "未知错误"
        result.event_data["last_payment_error"] = error
        self._apply_intent(obj, result, PaymentStatus.FAILED, f"支付失败: {error}")

    def _on_intent_requires_action(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        result.event_data["next_action"] = (obj.get("next_action") or {}).get("type") or "unknown"
        self._apply_intent(obj, result, PaymentStatus.REQUIRES_ACTION, "支付需要进一步操作")

    def _on_intent_canceled(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        self._apply_intent(obj, result, PaymentStatus.CANCELED, "支付已取消")

    def _on_charge_succeeded(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        metadata = obj.get("metadata") or {}
        outcome = obj.get("outcome") or {}
        result.transaction_id = obj.get("payment_intent") or obj.get("id")
        result.payment_status = PaymentStatus.SUCCEEDED
        result.customer_id = obj.get("customer")
        result.order_id = metadata.get("orderId")
        result.event_data.update({
            "charge_id": obj.get("id"),
            "amount": obj.get("amount"),
            "currency": obj.get("currency"),
            "risk_level": outcome.get("risk_level") or "unknown",
            "outcome_type": outcome.get("type") or "unknown",
        })
        result.processing_message = "扣款成功"
        result.is_processed = True

    def _on_dispute_created(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        result.transaction_id = obj.get("payment_intent") or obj.get("charge")
        result.event_data.update({
            "dispute_id": obj.get("id"),
            "charge_id": obj.get("charge"),
            "amount": obj.get("amount"),
            "dispute_reason": obj.get("reason"),
        })
        logger.warning(f"Stripe争议已创建: charge={obj.get('charge')} reason={obj.get('reason')}")
        result.processing_message = "争议已创建"
        result.is_processed = True

    def _on_customer_event(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        result.customer_id = obj.get("id")
        result.event_data["email"] = obj.get("email")
        result.processing_message = "客户信息已同步"
        result.is_processed = True

    def _on_payment_method_attached(self, obj: Dict[str, Any], result: WebhookResult) -> None:
        card = obj.get("card") or {}
        result.customer_id = obj.get("customer")
        result.event_data.update({
            "payment_method_id": obj.get("id"),
            "card_brand": card.get("brand"),
            "card_last4": card.get("last4"),
        })
        result.processing_message = "支付方式已绑定"
        result.is_processed = True


def create_payment_provider(provider: str = "Stripe") -> PaymentProviderService:
    """
    根据配置创建支付网关。

    Raises:
        ValidationException: 不支持的支付网关
    """
    if provider.lower() == "stripe":
        return StripePaymentProvider.from_settings(getattr(settings, "STRIPE_SETTINGS", {}))
    raise ValidationException("provider", f"不支持的支付网关: {provider}")
