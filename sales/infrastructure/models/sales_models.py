"""
购物车与订单基础设施层数据库模型。
"""
import uuid

from django.db import models


class CartModel(models.Model):
    """购物车数据库模型，匿名购物车的用户为空"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'identity.UserModel', on_delete=models.CASCADE, null=True, blank=True,
        related_name='carts', verbose_name="用户"
    )
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'sales_cart'
        verbose_name = "购物车"
        verbose_name_plural = "购物车"
        indexes = [
            models.Index(fields=['user', '-updated_at'], name='idx_cart_user'),
        ]


class CartItemModel(models.Model):
    """购物车商品项数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cart = models.ForeignKey(CartModel, on_delete=models.CASCADE, related_name='items', verbose_name="购物车")
    product = models.ForeignKey('catalog.ProductModel', on_delete=models.CASCADE, verbose_name="商品")
    variant = models.ForeignKey(
        'catalog.ProductVariantModel', on_delete=models.CASCADE, null=True, blank=True, verbose_name="变体"
    )
    quantity = models.PositiveIntegerField(verbose_name="数量")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    class Meta:
        db_table = 'sales_cart_item'
        verbose_name = "购物车商品"
        verbose_name_plural = "购物车商品"


class OrderModel(models.Model):
    """订单数据库模型，地址以快照形式保存"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'identity.UserModel', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='orders', verbose_name="用户"
    )
    shipping_address_id = models.UUIDField(null=True, blank=True, verbose_name="收货地址ID")
    billing_address_id = models.UUIDField(null=True, blank=True, verbose_name="账单地址ID")
    shipping_address = models.JSONField(verbose_name="收货地址")
    billing_address = models.JSONField(verbose_name="账单地址")
    currency = models.CharField(max_length=3, default="USD", verbose_name="货币")
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="小计")
    tax = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="税费")
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="运费")
    total = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="总额")
    status = models.CharField(max_length=20, verbose_name="订单状态")
    payment_status = models.CharField(max_length=30, verbose_name="支付状态")
    shipping_method = models.CharField(max_length=50, null=True, blank=True, verbose_name="配送方式")
    payment_method_id = models.UUIDField(null=True, blank=True, verbose_name="支付方式ID")
    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, verbose_name="已退款金额")
    refunded_at = models.DateTimeField(null=True, blank=True, verbose_name="退款时间")
    refund_reason = models.CharField(max_length=500, null=True, blank=True, verbose_name="退款原因")
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'sales_order'
        verbose_name = "订单"
        verbose_name_plural = "订单"
        indexes = [
            models.Index(fields=['user', '-created_at'], name='idx_order_user_created'),
            models.Index(fields=['status'], name='idx_order_status'),
        ]


class OrderItemModel(models.Model):
    """订单商品项数据库模型，商品删除后快照仍然保留"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(OrderModel, on_delete=models.CASCADE, related_name='items', verbose_name="订单")
    product_id = models.UUIDField(verbose_name="商品ID")
    variant_id = models.UUIDField(null=True, blank=True, verbose_name="变体ID")
    quantity = models.PositiveIntegerField(verbose_name="数量")
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="单价")
    total_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="小计")
    currency = models.CharField(max_length=3, default="USD", verbose_name="货币")
    product_data = models.JSONField(default=dict, verbose_name="商品快照")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    class Meta:
        db_table = 'sales_order_item'
        verbose_name = "订单商品"
        verbose_name_plural = "订单商品"
