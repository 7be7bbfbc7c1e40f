"""
支付API视图。
"""
import logging

from rest_framework.permissions import IsAuthenticated

from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.permissions import IsAdminOrManager, is_staff
from payments.api.serializers import (
    AddPaymentMethodSerializer,
    PartialRefundSerializer,
    ProcessPaymentSerializer,
    RefundSerializer,
)
from payments.application import (
    AddPaymentMethodCommand,
    DeletePaymentMethodCommand,
    ProcessOrderPaymentCommand,
    ProcessWebhookCommand,
    RefundOrderCommand,
    SetDefaultPaymentMethodCommand,
)
from payments.infrastructure.factory import PaymentsInfrastructureFactory

logger = logging.getLogger(__name__)


def get_payment_service():
    return PaymentsInfrastructureFactory().create_payment_service()


def get_payment_method_service():
    return PaymentsInfrastructureFactory().create_payment_method_service()


# ==================== 订单支付与退款 ====================

class OrderPaymentView(ApiBaseView):
    """订单支付接口，GET返回订单的支付记录"""
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        result = get_payment_service().get_order_payments(order_id, request.user.id, is_staff(request.user))
        return self.result_response(result, "获取支付记录成功")

    def post(self, request, order_id):
        data = self.validate(ProcessPaymentSerializer, request.data)
        command = ProcessOrderPaymentCommand(
            order_id=order_id,
            user_id=request.user.id,
            payment_method_id=data["payment_method_id"],
            external_reference=data.get("external_reference") or None,
        )
        return self.result_response(get_payment_service().process_order_payment(command), "支付处理成功")


class OrderRefundView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request, order_id):
        data = self.validate(RefundSerializer, request.data)
        command = RefundOrderCommand(order_id=order_id, reason=data.get("reason") or None)
        return self.result_response(get_payment_service().refund_order(command), "退款成功")


class OrderPartialRefundView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request, order_id):
        data = self.validate(PartialRefundSerializer, request.data)
        command = RefundOrderCommand(
            order_id=order_id,
            amount=data["amount"],
            currency=data.get("currency") or None,
            reason=data.get("reason") or None,
        )
        return self.result_response(get_payment_service().refund_order(command), "部分退款成功")


class WebhookView(ApiBaseView):
    """支付网关回调接口，由签名校验保证来源"""
    authentication_classes = []

    def post(self, request, provider):
        signature = request.META.get("HTTP_STRIPE_SIGNATURE")
        command = ProcessWebhookCommand(
            provider=provider,
            payload=request.body.decode("utf-8"),
            signature=signature,
        )
        result = get_payment_service().process_webhook(command)
        if result.is_failure:
            logger.warning(f"支付回调处理失败: {provider} {result.error.code}")
        return self.result_response(result, "回调处理成功")


# ==================== 支付方式 ====================

class PaymentMethodListCreateView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        result = get_payment_method_service().get_user_payment_methods(request.user.id)
        return self.result_response(result, "获取支付方式成功")

    def post(self, request):
        data = self.validate(AddPaymentMethodSerializer, request.data)
        command = AddPaymentMethodCommand(
            user_id=request.user.id,
            type=data["type"],
            provider=data["provider"],
            token=data["token"],
            user_email=request.user.email,
            card_brand=data.get("card_brand") or None,
            last_four_digits=data.get("last_four_digits") or None,
            expiry_month=data.get("expiry_month"),
            expiry_year=data.get("expiry_year"),
            email=data.get("email") or None,
            is_default=data["is_default"],
            metadata=data["metadata"],
        )
        result = get_payment_method_service().add_payment_method(command)
        return self.result_response(result, "支付方式添加成功", created=True)


class PaymentMethodDetailView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def get(self, request, method_id):
        result = get_payment_method_service().get_payment_method(method_id, request.user.id)
        return self.result_response(result, "获取支付方式成功")

    def delete(self, request, method_id):
        command = DeletePaymentMethodCommand(id=method_id, user_id=request.user.id)
        return self.result_response(get_payment_method_service().delete_payment_method(command), "支付方式删除成功")


class PaymentMethodDefaultView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def put(self, request, method_id):
        command = SetDefaultPaymentMethodCommand(id=method_id, user_id=request.user.id)
        result = get_payment_method_service().set_default_payment_method(command)
        return self.result_response(result, "默认支付方式设置成功")
