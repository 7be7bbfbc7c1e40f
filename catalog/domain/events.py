"""
商品目录领域事件。
定义分类、属性、商品及商品变体相关的领域事件。
"""
from typing import Any, Optional

from core.domain.events import DomainEvent


class CategoryEvent(DomainEvent):
    entity_type = "Category"
    entity_id_field = "category_id"

    def __init__(self, category_id: Any):
        super().__init__()
        self.category_id = category_id


class CategoryCreatedEvent(CategoryEvent):
    """分类创建事件"""


class CategoryUpdatedEvent(CategoryEvent):
    """分类更新事件"""


class CategoryDeletedEvent(CategoryEvent):
    """分类删除事件"""


class CategoryStatusChangedEvent(CategoryEvent):
    """分类状态变更事件"""

    def __init__(self, category_id: Any, is_active: bool):
        super().__init__(category_id)
        self.is_active = is_active


class CategoryHierarchyChangedEvent(CategoryEvent):
    """分类层级变更事件"""

    def __init__(self, category_id: Any, old_parent_id: Optional[Any], new_parent_id: Optional[Any]):
        """
        初始化分类层级变更事件。

        Args:
            category_id: 分类ID
            old_parent_id: 原父分类ID
            new_parent_id: 新父分类ID
        """
        super().__init__(category_id)
        self.old_parent_id = old_parent_id
        self.new_parent_id = new_parent_id


class AttributeEvent(DomainEvent):
    entity_type = "Attribute"
    entity_id_field = "attribute_id"

    def __init__(self, attribute_id: Any):
        super().__init__()
        self.attribute_id = attribute_id


class AttributeCreatedEvent(AttributeEvent):
    """属性创建事件"""


class AttributeUpdatedEvent(AttributeEvent):
    """属性更新事件"""


class AttributeDeletedEvent(AttributeEvent):
    """属性删除事件"""


class ProductEvent(DomainEvent):
    entity_type = "Product"
    entity_id_field = "product_id"

    def __init__(self, product_id: Any):
        super().__init__()
        self.product_id = product_id


class ProductCreatedEvent(ProductEvent):
    """商品创建事件"""


class ProductUpdatedEvent(ProductEvent):
    """商品更新事件"""


class ProductDeletedEvent(ProductEvent):
    """商品删除事件"""


class ProductStatusChangedEvent(ProductEvent):
    """商品上下架事件"""

    def __init__(self, product_id: Any, is_active: bool):
        super().__init__(product_id)
        self.is_active = is_active


class ProductCategoryAddedEvent(ProductEvent):
    """商品加入分类事件"""

    def __init__(self, product_id: Any, category_id: Any):
        super().__init__(product_id)
        self.category_id = category_id


class ProductCategoryRemovedEvent(ProductEvent):
    """商品移出分类事件"""

    def __init__(self, product_id: Any, category_id: Any):
        super().__init__(product_id)
        self.category_id = category_id


class ProductImageAddedEvent(ProductEvent):
    """商品图片添加事件"""

    def __init__(self, product_id: Any, image_key: str, variant_id: Any = None):
        super().__init__(product_id)
        self.image_key = image_key
        self.variant_id = variant_id


class ProductImageRemovedEvent(ProductEvent):
    """商品图片移除事件"""

    def __init__(self, product_id: Any, image_key: str, variant_id: Any = None):
        super().__init__(product_id)
        self.image_key = image_key
        self.variant_id = variant_id


class ProductVariantEvent(DomainEvent):
    entity_type = "ProductVariant"
    entity_id_field = "variant_id"

    def __init__(self, product_id: Any, variant_id: Any):
        super().__init__()
        self.product_id = product_id
        self.variant_id = variant_id


class ProductVariantAddedEvent(ProductVariantEvent):
    """商品变体添加事件"""


class ProductVariantUpdatedEvent(ProductVariantEvent):
    """商品变体更新事件"""


class ProductVariantDeletedEvent(ProductVariantEvent):
    """商品变体删除事件"""


class ProductVariantStockChangedEvent(ProductVariantEvent):
    """商品变体库存变更事件"""

    def __init__(self, product_id: Any, variant_id: Any, old_quantity: int, new_quantity: int):
        """
        初始化库存变更事件。

        Args:
            product_id: 商品ID
            variant_id: 变体ID
            old_quantity: 变更前库存
            new_quantity: 变更后库存
        """
        super().__init__(product_id, variant_id)
        self.old_quantity = old_quantity
        self.new_quantity = new_quantity
