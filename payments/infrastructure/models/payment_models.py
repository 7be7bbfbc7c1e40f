"""
支付基础设施层数据库模型。
"""
import uuid

from django.db import models


class PaymentModel(models.Model):
    """支付记录数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey('sales.OrderModel', on_delete=models.CASCADE, related_name='payments', verbose_name="订单")
    user_id = models.UUIDField(null=True, blank=True, verbose_name="用户ID")
    amount = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="金额")
    currency = models.CharField(max_length=3, verbose_name="货币")
    method_type = models.CharField(max_length=20, verbose_name="支付类型")
    provider = models.CharField(max_length=20, verbose_name="支付网关")
    status = models.CharField(max_length=30, verbose_name="支付状态")
    external_reference = models.CharField(max_length=255, null=True, blank=True, verbose_name="外部引用")
    transaction_id = models.CharField(max_length=255, null=True, blank=True, db_index=True, verbose_name="交易号")
    payment_method_id = models.UUIDField(null=True, blank=True, verbose_name="支付方式ID")
    processed_at = models.DateTimeField(null=True, blank=True, verbose_name="处理时间")
    error_message = models.TextField(null=True, blank=True, verbose_name="错误信息")
    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, verbose_name="已退款金额")
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'payments_payment'
        verbose_name = "支付记录"
        verbose_name_plural = "支付记录"
        indexes = [
            models.Index(fields=['order', '-created_at'], name='idx_payment_order'),
        ]


class PaymentMethodModel(models.Model):
    """支付方式数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'identity.UserModel', on_delete=models.CASCADE, related_name='payment_methods', verbose_name="用户"
    )
    type = models.CharField(max_length=20, verbose_name="类型")
    provider = models.CharField(max_length=20, verbose_name="支付网关")
    token = models.CharField(max_length=255, verbose_name="支付令牌")
    display_name = models.CharField(max_length=255, verbose_name="显示名称")
    card_brand = models.CharField(max_length=50, null=True, blank=True, verbose_name="卡品牌")
    last_four_digits = models.CharField(max_length=4, null=True, blank=True, verbose_name="卡号后四位")
    expiry_month = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name="有效期月份")
    expiry_year = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name="有效期年份")
    is_default = models.BooleanField(default=False, verbose_name="是否默认")
    is_active = models.BooleanField(default=True, verbose_name="是否启用")
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'payments_payment_method'
        verbose_name = "支付方式"
        verbose_name_plural = "支付方式"
        indexes = [
            models.Index(fields=['user', 'is_default'], name='idx_payment_method_user'),
        ]
