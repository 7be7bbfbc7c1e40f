"""
审计日志API序列化器。
"""
from rest_framework import serializers

from audit.domain import AuditAction


class AuditLogQuerySerializer(serializers.Serializer):
    entity_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    entity_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    user_id = serializers.UUIDField(required=False)
    action = serializers.ChoiceField(choices=AuditAction.ALL, required=False)
