"""
地址API序列化器。
"""
from rest_framework import serializers

from shipping.domain import AddressType


class AddressSerializer(serializers.Serializer):
    """地址请求序列化器"""
    address_line1 = serializers.CharField(max_length=255)
    address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    country = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    address_type = serializers.ChoiceField(choices=AddressType.ALL, default=AddressType.SHIPPING)


class CreateAddressSerializer(AddressSerializer):
    is_default = serializers.BooleanField(required=False, default=False)


class UpdateAddressSerializer(AddressSerializer):
    address_type = serializers.ChoiceField(choices=AddressType.ALL, required=False, allow_null=True)
