"""
支付API序列化器。
"""
from rest_framework import serializers

from payments.domain import PaymentMethodType, PaymentProvider


class ProcessPaymentSerializer(serializers.Serializer):
    payment_method_id = serializers.UUIDField()
    external_reference = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class RefundSerializer(serializers.Serializer):
    """全额退款"""
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)


class PartialRefundSerializer(RefundSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True, allow_null=True)


class AddPaymentMethodSerializer(serializers.Serializer):
    """添加支付方式，银行卡需要卡信息，PayPal需要邮箱"""
    type = serializers.ChoiceField(choices=PaymentMethodType.ALL)
    provider = serializers.ChoiceField(choices=PaymentProvider.ALL)
    token = serializers.CharField(max_length=255)
    card_brand = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    last_four_digits = serializers.CharField(max_length=4, required=False, allow_blank=True, allow_null=True)
    expiry_month = serializers.IntegerField(min_value=1, max_value=12, required=False, allow_null=True)
    expiry_year = serializers.IntegerField(min_value=2000, required=False, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    is_default = serializers.BooleanField(required=False, default=False)
    metadata = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        if attrs["type"] == PaymentMethodType.CREDIT_CARD:
            missing = [f for f in ("card_brand", "last_four_digits", "expiry_month", "expiry_year") if not attrs.get(f)]
            if missing:
                raise serializers.ValidationError({f: "银行卡支付方式必须提供该字段" for f in missing})
        elif not attrs.get("email"):
            raise serializers.ValidationError({"email": "PayPal支付方式必须提供邮箱"})
        return attrs
