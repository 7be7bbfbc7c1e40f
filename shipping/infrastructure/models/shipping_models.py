"""
配送基础设施层数据库模型。
"""
import uuid

from django.db import models


class AddressModel(models.Model):
    """地址数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'identity.UserModel', on_delete=models.CASCADE, related_name='addresses', verbose_name="用户"
    )
    address_line1 = models.CharField(max_length=255, verbose_name="地址第一行")
    address_line2 = models.CharField(max_length=255, null=True, blank=True, verbose_name="地址第二行")
    city = models.CharField(max_length=100, verbose_name="城市")
    state = models.CharField(max_length=100, verbose_name="州/省")
    country = models.CharField(max_length=100, verbose_name="国家")
    postal_code = models.CharField(max_length=20, verbose_name="邮政编码")
    phone = models.CharField(max_length=20, null=True, blank=True, verbose_name="电话")
    is_default = models.BooleanField(default=False, verbose_name="是否默认地址")
    address_type = models.CharField(max_length=20, default="Shipping", verbose_name="地址类型")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'shipping_address'
        verbose_name = "地址"
        verbose_name_plural = "地址"
        indexes = [
            models.Index(fields=['user', 'is_default'], name='idx_address_user_default'),
        ]

    def __str__(self):
        return f"{self.address_line1}, {self.city}"
