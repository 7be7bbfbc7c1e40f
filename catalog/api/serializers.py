"""
商品目录API序列化器。
负责请求数据的反序列化和验证。
"""
from django.core.validators import MinValueValidator
from rest_framework import serializers

from catalog.domain import SEARCH_SORT_OPTIONS, AttributeType


# 分类序列化器
class CategoryCreateSerializer(serializers.Serializer):
    """创建分类请求序列化器"""
    name = serializers.CharField(max_length=100)
    slug = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    parent_id = serializers.UUIDField(required=False, allow_null=True)


class CategoryUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    slug = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CategoryParentSerializer(serializers.Serializer):
    parent_id = serializers.UUIDField(required=False, allow_null=True)


class StatusSerializer(serializers.Serializer):
    """启用/停用请求序列化器"""
    is_active = serializers.BooleanField()


# 属性序列化器
class AttributeCreateSerializer(serializers.Serializer):
    """创建属性请求序列化器"""
    name = serializers.CharField(max_length=100)
    display_name = serializers.CharField(max_length=100)
    type = serializers.ChoiceField(choices=AttributeType.ALL)
    configuration = serializers.DictField(required=False, default=dict)
    filterable = serializers.BooleanField(required=False, default=False)
    searchable = serializers.BooleanField(required=False, default=False)
    is_variant = serializers.BooleanField(required=False, default=False)


class AttributeUpdateSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=100)
    configuration = serializers.DictField(required=False)
    filterable = serializers.BooleanField(required=False)
    searchable = serializers.BooleanField(required=False)
    is_variant = serializers.BooleanField(required=False)


# 商品序列化器
class ProductCreateSerializer(serializers.Serializer):
    """创建商品请求序列化器"""
    name = serializers.CharField(max_length=255)
    slug = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = serializers.CharField(max_length=3, required=False, default="USD")
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
    category_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    attributes = serializers.DictField(required=False, default=dict)
    metadata = serializers.DictField(required=False, default=dict)


class ProductUpdateSerializer(serializers.Serializer):
    """更新商品请求序列化器"""
    name = serializers.CharField(max_length=255)
    slug = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = serializers.CharField(max_length=3, required=False, default="USD")
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    category_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    attributes = serializers.DictField(required=False)


class ProductListQuerySerializer(serializers.Serializer):
    """商品列表查询参数序列化器"""
    search = serializers.CharField(required=False, allow_blank=True)
    category_id = serializers.UUIDField(required=False)
    min_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    max_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    active_only = serializers.BooleanField(required=False, default=False)
    in_stock_only = serializers.BooleanField(required=False, default=False)
    sort_by = serializers.ChoiceField(
        choices=["name", "base_price", "price", "created_at", "updated_at"], required=False, default="created_at"
    )
    sort_direction = serializers.ChoiceField(choices=["asc", "desc"], required=False, default="desc")


class ProductSearchQuerySerializer(serializers.Serializer):
    """
    商品搜索查询参数序列化器。
    列表参数可重复传入或用逗号分隔，属性筛选使用attr_<属性名>=值1,值2。
    """
    q = serializers.CharField(required=False, allow_blank=True, default="")
    category_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    category_slugs = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    attribute_filters = serializers.DictField(
        child=serializers.ListField(child=serializers.CharField(), allow_empty=False), required=False, default=dict
    )
    price_min = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    price_max = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    in_stock_only = serializers.BooleanField(required=False, default=False)
    active_only = serializers.BooleanField(required=False, default=True)
    sort_by = serializers.ChoiceField(choices=SEARCH_SORT_OPTIONS, required=False, default="relevance")
    sort_descending = serializers.BooleanField(required=False, default=False)


class SearchIndexRebuildSerializer(serializers.Serializer):
    clear_existing = serializers.BooleanField(required=False, default=True)


class VariantCreateSerializer(serializers.Serializer):
    """添加变体请求序列化器"""
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, validators=[MinValueValidator(0)]
    )
    stock_quantity = serializers.IntegerField(required=False, default=0, validators=[MinValueValidator(0)])
    is_active = serializers.BooleanField(required=False, default=True)
    metadata = serializers.DictField(required=False, default=dict)
    attributes = serializers.DictField(required=False, default=dict)


class VariantUpdateSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, validators=[MinValueValidator(0)]
    )
    metadata = serializers.DictField(required=False)
    attributes = serializers.DictField(required=False)


class VariantStockSerializer(serializers.Serializer):
    """变体库存请求序列化器"""
    quantity = serializers.IntegerField(validators=[MinValueValidator(0)])
    operation = serializers.ChoiceField(choices=["set", "add", "remove"], required=False, default="set")


class ProductImageUploadSerializer(serializers.Serializer):
    """商品图片上传请求序列化器"""
    file = serializers.FileField()
    alt_text = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    is_default = serializers.BooleanField(required=False, default=False)
    display_order = serializers.IntegerField(required=False, allow_null=True)
    variant_id = serializers.UUIDField(required=False, allow_null=True)


class ProductImageDefaultSerializer(serializers.Serializer):
    image_key = serializers.CharField(max_length=500)


class ProductImageOrderSerializer(serializers.Serializer):
    """图片顺序请求序列化器，orders为图片键到显示序号的映射"""
    orders = serializers.DictField(child=serializers.IntegerField(min_value=0), allow_empty=False)
