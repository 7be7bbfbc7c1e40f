"""
身份基础设施层数据库模型。
定义用户和刷新令牌的Django ORM模型。
"""
import uuid

from django.db import models


class UserModel(models.Model):
    """用户数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=255, unique=True, verbose_name="邮箱")
    password_hash = models.CharField(max_length=255, verbose_name="密码哈希")
    first_name = models.CharField(max_length=100, verbose_name="名")
    middle_name = models.CharField(max_length=100, null=True, blank=True, verbose_name="中间名")
    last_name = models.CharField(max_length=100, verbose_name="姓")
    phone = models.CharField(max_length=20, null=True, blank=True, verbose_name="电话")
    role = models.CharField(max_length=20, default="Customer", verbose_name="角色")
    is_active = models.BooleanField(default=True, verbose_name="是否启用")
    email_verified = models.BooleanField(default=False, verbose_name="邮箱已验证")
    email_verification_token = models.CharField(
        max_length=100, null=True, blank=True, db_index=True, verbose_name="邮箱验证令牌"
    )
    email_verification_expires = models.DateTimeField(null=True, blank=True, verbose_name="验证令牌过期时间")
    password_reset_token = models.CharField(
        max_length=100, null=True, blank=True, db_index=True, verbose_name="密码重置令牌"
    )
    password_reset_expires = models.DateTimeField(null=True, blank=True, verbose_name="重置令牌过期时间")
    last_login = models.DateTimeField(null=True, blank=True, verbose_name="最后登录时间")
    failed_login_attempts = models.PositiveIntegerField(default=0, verbose_name="连续登录失败次数")
    last_failed_attempt = models.DateTimeField(null=True, blank=True, verbose_name="最后登录失败时间")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    # 版本号，用于乐观锁
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'identity_user'
        verbose_name = "用户"
        verbose_name_plural = "用户"
        indexes = [
            models.Index(fields=['role'], name='idx_user_role'),
            models.Index(fields=['created_at'], name='idx_user_created'),
        ]

    def __str__(self):
        return self.email


class RefreshTokenModel(models.Model):
    """刷新令牌数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        UserModel, on_delete=models.CASCADE, related_name='refresh_tokens', verbose_name="用户"
    )
    token = models.CharField(max_length=255, unique=True, verbose_name="令牌")
    issued_at = models.DateTimeField(verbose_name="签发时间")
    expires_at = models.DateTimeField(verbose_name="过期时间")
    is_revoked = models.BooleanField(default=False, verbose_name="是否已吊销")
    revoked_reason = models.CharField(max_length=255, null=True, blank=True, verbose_name="吊销原因")
    ip_address = models.CharField(max_length=45, null=True, blank=True, verbose_name="IP地址")
    user_agent = models.CharField(max_length=255, null=True, blank=True, verbose_name="User-Agent")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    class Meta:
        db_table = 'identity_refresh_token'
        verbose_name = "刷新令牌"
        verbose_name_plural = "刷新令牌"
        indexes = [
            models.Index(fields=['user', 'is_revoked'], name='idx_token_user_revoked'),
        ]
