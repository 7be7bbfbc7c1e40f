"""
审计基础设施层数据库模型。
"""
import uuid

from django.db import models


class AuditLogModel(models.Model):
    """审计日志数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    entity_type = models.CharField(max_length=100, verbose_name="实体类型")
    entity_id = models.CharField(max_length=100, verbose_name="实体ID")
    action = models.CharField(max_length=20, verbose_name="操作")
    old_values = models.JSONField(null=True, blank=True, verbose_name="旧值")
    new_values = models.JSONField(null=True, blank=True, verbose_name="新值")
    user_id = models.UUIDField(null=True, blank=True, verbose_name="操作用户")
    ip_address = models.CharField(max_length=45, null=True, blank=True, verbose_name="IP地址")
    user_agent = models.TextField(null=True, blank=True, verbose_name="User-Agent")
    app_version = models.CharField(max_length=50, null=True, blank=True, verbose_name="应用版本")
    created_at = models.DateTimeField(verbose_name="创建时间")

    class Meta:
        db_table = 'audit_log'
        verbose_name = "审计日志"
        verbose_name_plural = "审计日志"
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='idx_audit_entity'),
            models.Index(fields=['user_id'], name='idx_audit_user'),
            models.Index(fields=['-created_at'], name='idx_audit_created'),
        ]
