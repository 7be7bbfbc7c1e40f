"""
发件箱基础设施层数据库模型。
"""
import uuid

from django.db import models


class OutboxMessageModel(models.Model):
    """发件箱消息数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=255, verbose_name="消息类型")
    content = models.JSONField(verbose_name="消息内容")
    created_at = models.DateTimeField(verbose_name="创建时间")
    processed_at = models.DateTimeField(null=True, blank=True, verbose_name="处理时间")
    error = models.TextField(null=True, blank=True, verbose_name="错误信息")
    retry_count = models.PositiveIntegerField(default=0, verbose_name="重试次数")
    scheduled_at = models.DateTimeField(verbose_name="计划处理时间")

    class Meta:
        db_table = 'outbox_message'
        verbose_name = "发件箱消息"
        verbose_name_plural = "发件箱消息"
        indexes = [
            models.Index(fields=['processed_at', 'scheduled_at'], name='idx_outbox_pending'),
            models.Index(fields=['created_at'], name='idx_outbox_created'),
        ]

    def __str__(self):
        return f"{self.type} ({self.id})"
