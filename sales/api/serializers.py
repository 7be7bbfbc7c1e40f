"""
购物车和订单API序列化器。
"""
from rest_framework import serializers

from sales.domain import OrderStatus


class CreateCartSerializer(serializers.Serializer):
    metadata = serializers.DictField(required=False, default=dict)


class AddCartItemSerializer(serializers.Serializer):
    cart_id = serializers.UUIDField(required=False, allow_null=True)
    product_id = serializers.UUIDField()
    variant_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    """quantity为0时移除商品项"""
    cart_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=0)


class CartIdSerializer(serializers.Serializer):
    cart_id = serializers.UUIDField(required=False, allow_null=True)


class AssignCartSerializer(serializers.Serializer):
    cart_id = serializers.UUIDField()


class CreateOrderSerializer(serializers.Serializer):
    shipping_address_id = serializers.UUIDField()
    billing_address_id = serializers.UUIDField(required=False, allow_null=True)
    shipping_method = serializers.CharField(max_length=50, default="standard")
    cart_id = serializers.UUIDField(required=False, allow_null=True)


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.ALL)


class ShipOrderSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
