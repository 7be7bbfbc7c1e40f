"""
身份API序列化器。
负责认证和用户请求数据的反序列化和验证。
"""
from rest_framework import serializers

from identity.domain import UserRole


class RegisterSerializer(serializers.Serializer):
    """注册请求序列化器"""
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(max_length=255, trim_whitespace=False)
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)


class LoginSerializer(serializers.Serializer):
    """登录请求序列化器，密码不做首尾空白处理"""
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(max_length=255, trim_whitespace=False)


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(max_length=500)


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(max_length=500)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=255)


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=255)
    new_password = serializers.CharField(max_length=255, trim_whitespace=False)
    confirm_password = serializers.CharField(max_length=255, trim_whitespace=False)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(max_length=255, trim_whitespace=False)
    new_password = serializers.CharField(max_length=255, trim_whitespace=False)
    confirm_password = serializers.CharField(max_length=255, trim_whitespace=False)


class UpdateProfileSerializer(serializers.Serializer):
    """更新个人资料请求序列化器"""
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    middle_name = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)


class UpdateUserSerializer(UpdateProfileSerializer):
    email = serializers.EmailField(max_length=255, required=False, allow_blank=True, allow_null=True)


class ChangeRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.ALL)


class UserStatusSerializer(serializers.Serializer):
    """用户状态请求序列化器，未提供is_active时视为停用"""
    is_active = serializers.BooleanField(required=False, default=False)
