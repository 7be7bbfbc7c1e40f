"""
商品目录基础设施层数据库模型。
定义与分类、属性、商品、变体和图片相关的Django ORM模型。
"""
import uuid

from django.db import models


class CategoryModel(models.Model):
    """分类数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, verbose_name="分类名称")
    slug = models.SlugField(max_length=150, unique=True, verbose_name="分类别名")
    description = models.TextField(null=True, blank=True, verbose_name="分类描述")
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children',
        verbose_name="父分类"
    )
    level = models.PositiveIntegerField(default=0, verbose_name="层级")
    path = models.CharField(max_length=1000, verbose_name="路径")
    is_active = models.BooleanField(default=True, verbose_name="是否启用")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    # 版本号，用于乐观锁
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'catalog_category'
        verbose_name = "商品分类"
        verbose_name_plural = "商品分类"
        indexes = [
            models.Index(fields=['parent'], name='idx_category_parent'),
            models.Index(fields=['path'], name='idx_category_path'),
        ]

    def __str__(self):
        return self.name


class AttributeModel(models.Model):
    """属性数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True, verbose_name="属性名称")
    display_name = models.CharField(max_length=100, verbose_name="显示名称")
    type = models.CharField(max_length=20, verbose_name="属性类型")
    configuration = models.JSONField(default=dict, verbose_name="属性配置")
    filterable = models.BooleanField(default=False, verbose_name="可筛选")
    searchable = models.BooleanField(default=False, verbose_name="可搜索")
    is_variant = models.BooleanField(default=False, verbose_name="是否变体属性")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'catalog_attribute'
        verbose_name = "商品属性"
        verbose_name_plural = "商品属性"

    def __str__(self):
        return self.name


class ProductModel(models.Model):
    """商品数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, verbose_name="商品名称")
    slug = models.SlugField(max_length=255, unique=True, verbose_name="商品别名")
    description = models.TextField(null=True, blank=True, verbose_name="商品描述")
    base_price_amount = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="基础价格")
    base_price_currency = models.CharField(max_length=3, default="USD", verbose_name="价格货币")
    sku = models.CharField(max_length=100, unique=True, null=True, blank=True, verbose_name="SKU")
    is_active = models.BooleanField(default=True, verbose_name="是否上架")
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    categories = models.ManyToManyField(
        CategoryModel,
        related_name='products',
        blank=True,
        db_table='catalog_product_category',
        verbose_name="商品分类"
    )
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")
    version = models.PositiveIntegerField(default=0, verbose_name="版本号")

    class Meta:
        db_table = 'catalog_product'
        verbose_name = "商品"
        verbose_name_plural = "商品"
        indexes = [
            models.Index(fields=['name'], name='idx_product_name'),
            models.Index(fields=['is_active', 'base_price_amount'], name='idx_product_active_price'),
            models.Index(fields=['created_at'], name='idx_product_created'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(base_price_amount__gte=0), name='base_price_amount_gte_0'),
        ]

    def __str__(self):
        return self.name


class ProductAttributeModel(models.Model):
    """商品属性值数据库模型"""
    id = models.BigAutoField(primary_key=True)
    product = models.ForeignKey(
        ProductModel, on_delete=models.CASCADE, related_name='attribute_values', verbose_name="商品"
    )
    attribute = models.ForeignKey(
        AttributeModel, on_delete=models.CASCADE, related_name='product_values', verbose_name="属性"
    )
    value = models.JSONField(null=True, verbose_name="属性值")

    class Meta:
        db_table = 'catalog_product_attribute'
        verbose_name = "商品属性值"
        verbose_name_plural = "商品属性值"
        unique_together = ('product', 'attribute')


class ProductVariantModel(models.Model):
    """商品变体数据库模型"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        ProductModel, on_delete=models.CASCADE, related_name='variants', verbose_name="商品"
    )
    sku = models.CharField(max_length=100, unique=True, null=True, blank=True, verbose_name="SKU")
    price_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, verbose_name="价格")
    price_currency = models.CharField(max_length=3, null=True, blank=True, verbose_name="价格货币")
    stock_quantity = models.PositiveIntegerField(default=0, verbose_name="库存")
    is_active = models.BooleanField(default=True, verbose_name="是否启用")
    metadata = models.JSONField(default=dict, verbose_name="元数据")
    created_at = models.DateTimeField(verbose_name="创建时间")
    updated_at = models.DateTimeField(verbose_name="更新时间")

    class Meta:
        db_table = 'catalog_product_variant'
        verbose_name = "商品变体"
        verbose_name_plural = "商品变体"
        indexes = [
            models.Index(fields=['product'], name='idx_variant_product'),
            models.Index(fields=['stock_quantity'], name='idx_variant_stock'),
        ]

    def __str__(self):
        return self.sku or str(self.id)


class VariantAttributeModel(models.Model):
    """变体属性值数据库模型"""
    id = models.BigAutoField(primary_key=True)
    variant = models.ForeignKey(
        ProductVariantModel, on_delete=models.CASCADE, related_name='attribute_values', verbose_name="变体"
    )
    attribute = models.ForeignKey(
        AttributeModel, on_delete=models.CASCADE, related_name='variant_values', verbose_name="属性"
    )
    value = models.JSONField(null=True, verbose_name="属性值")

    class Meta:
        db_table = 'catalog_variant_attribute'
        verbose_name = "变体属性值"
        verbose_name_plural = "变体属性值"
        unique_together = ('variant', 'attribute')


class ProductImageModel(models.Model):
    """商品图片数据库模型，variant为空时属于商品本身"""
    id = models.BigAutoField(primary_key=True)
    product = models.ForeignKey(
        ProductModel, on_delete=models.CASCADE, related_name='images', verbose_name="商品"
    )
    variant = models.ForeignKey(
        ProductVariantModel, on_delete=models.CASCADE, null=True, blank=True,
        related_name='images', verbose_name="变体"
    )
    image_key = models.CharField(max_length=500, verbose_name="图片键")
    alt_text = models.CharField(max_length=255, blank=True, default="", verbose_name="替代文本")
    is_default = models.BooleanField(default=False, verbose_name="是否默认图片")
    display_order = models.IntegerField(default=0, verbose_name="显示顺序")

    class Meta:
        db_table = 'catalog_product_image'
        verbose_name = "商品图片"
        verbose_name_plural = "商品图片"
        ordering = ['display_order']


class ProductSearchDocumentModel(models.Model):
    """商品搜索文档，由搜索服务根据商品数据生成"""
    product = models.OneToOneField(
        ProductModel, on_delete=models.CASCADE, primary_key=True, related_name='search_document', verbose_name="商品"
    )
    name = models.CharField(max_length=255, verbose_name="商品名称")
    slug = models.CharField(max_length=255, verbose_name="商品别名")
    sku = models.CharField(max_length=100, blank=True, default="", verbose_name="SKU")
    description = models.TextField(blank=True, default="", verbose_name="商品描述")
    search_text = models.TextField(verbose_name="检索文本")
    base_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="基础价格")
    currency = models.CharField(max_length=3, default="USD", verbose_name="价格货币")
    min_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="最低价格")
    max_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="最高价格")
    is_active = models.BooleanField(default=True, verbose_name="是否上架")
    has_stock = models.BooleanField(default=False, verbose_name="是否有库存")
    total_stock = models.PositiveIntegerField(default=0, verbose_name="总库存")
    variant_skus = models.JSONField(default=list, verbose_name="变体SKU")
    default_image_key = models.CharField(max_length=500, blank=True, default="", verbose_name="默认图片键")
    created_at = models.DateTimeField(verbose_name="商品创建时间")
    updated_at = models.DateTimeField(verbose_name="商品更新时间")
    indexed_at = models.DateTimeField(verbose_name="索引时间")

    class Meta:
        db_table = 'catalog_product_search_document'
        verbose_name = "商品搜索文档"
        verbose_name_plural = "商品搜索文档"
        indexes = [
            models.Index(fields=['is_active', 'min_price'], name='idx_search_active_price'),
        ]


class ProductSearchFacetModel(models.Model):
    """
    商品搜索分面值。
    kind为category时name是分类别名、value是分类ID；kind为attribute时name是小写属性名。source_id是分面来源的分类或属性ID。
    """
    id = models.BigAutoField(primary_key=True)
    document = models.ForeignKey(
        ProductSearchDocumentModel, on_delete=models.CASCADE, related_name='facets', verbose_name="搜索文档"
    )
    kind = models.CharField(max_length=20, verbose_name="分面类型")
    name = models.CharField(max_length=150, verbose_name="分面名称")
    value = models.CharField(max_length=255, verbose_name="分面值")
    label = models.CharField(max_length=255, blank=True, default="", verbose_name="显示名称")
    source_id = models.CharField(max_length=64, blank=True, default="", verbose_name="来源ID")

    class Meta:
        db_table = 'catalog_product_search_facet'
        verbose_name = "商品搜索分面"
        verbose_name_plural = "商品搜索分面"
        indexes = [
            models.Index(fields=['kind', 'name', 'value'], name='idx_search_facet_value'),
        ]
