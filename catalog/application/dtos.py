"""
商品目录应用服务层的数据传输对象(DTOs)。
定义应用服务与外部通信使用的数据结构。
"""
from typing import Any, Callable, Dict, List, Optional

from core.domain.events import to_primitive
from catalog.domain import Attribute, Category, Product, ProductImage, ProductVariant

UrlBuilder = Callable[[str], str]


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class CategoryDTO:
    """分类DTO"""

    def __init__(self, category: Category):
        self.id = str(category.id)
        self.name = category.name
        self.slug = category.slug.value
        self.description = category.description
        self.parent_id = str(category.parent_id) if category.parent_id else None
        self.level = category.level
        self.path = category.path
        self.is_active = category.is_active
        self.created_at = category.created_at
        self.updated_at = category.updated_at

    @classmethod
    def from_domain(cls, category: Category) -> 'CategoryDTO':
        return cls(category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "parent_id": self.parent_id,
            "level": self.level,
            "path": self.path,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class AttributeDTO:
    """属性DTO"""

    def __init__(self, attribute: Attribute):
        self.id = str(attribute.id)
        self.name = attribute.name
        self.display_name = attribute.display_name
        self.type = attribute.type
        self.configuration = dict(attribute.configuration)
        self.filterable = attribute.filterable
        self.searchable = attribute.searchable
        self.is_variant = attribute.is_variant
        self.created_at = attribute.created_at
        self.updated_at = attribute.updated_at

    @classmethod
    def from_domain(cls, attribute: Attribute) -> 'AttributeDTO':
        return cls(attribute)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "type": self.type,
            "configuration": to_primitive(self.configuration),
            "filterable": self.filterable,
            "searchable": self.searchable,
            "is_variant": self.is_variant,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ProductImageDTO:
    """商品图片DTO"""

    def __init__(self, image: ProductImage, url: Optional[str] = None):
        self.image_key = image.image_key
        self.url = url
        self.alt_text = image.alt_text
        self.is_default = image.is_default
        self.display_order = image.display_order

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image_key": self.image_key,
            "url": self.url,
            "alt_text": self.alt_text,
            "is_default": self.is_default,
            "display_order": self.display_order,
        }


def _images(images, url_builder: Optional[UrlBuilder]) -> List[ProductImageDTO]:
    return [ProductImageDTO(i, url_builder(i.image_key) if url_builder else None) for i in images]


class ProductVariantDTO:
    """商品变体DTO，price为变体的实际售价"""

    def __init__(self, variant: ProductVariant, product: Product, url_builder: Optional[UrlBuilder] = None):
        self.id = str(variant.id)
        self.product_id = str(product.id)
        self.sku = variant.sku
        self.price = variant.effective_price(product.base_price)
        self.has_custom_price = variant.price is not None
        self.stock_quantity = variant.stock_quantity
        self.is_active = variant.is_active
        self.metadata = dict(variant.metadata)
        self.attributes = dict(variant.attributes)
        self.images = _images(variant.images, url_builder)
        self.created_at = variant.created_at
        self.updated_at = variant.updated_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "sku": self.sku,
            "price": self.price.to_dict(),
            "has_custom_price": self.has_custom_price,
            "stock_quantity": self.stock_quantity,
            "is_active": self.is_active,
            "metadata": to_primitive(self.metadata),
            "attributes": to_primitive(self.attributes),
            "images": [i.to_dict() for i in self.images],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ProductDTO:
    """商品数据传输对象，用于返回商品信息"""

    def __init__(self, product: Product, url_builder: Optional[UrlBuilder] = None):
        self.id = str(product.id)
        self.name = product.name
        self.slug = product.slug.value
        self.description = product.description
        self.base_price = product.base_price
        self.sku = product.sku
        self.is_active = product.is_active
        self.metadata = dict(product.metadata)
        self.category_ids = [str(c) for c in product.category_ids]
        self.attributes = dict(product.attributes)
        self.images = _images(product.images, url_builder)
        self.variants = [ProductVariantDTO(v, product, url_builder) for v in product.variants]
        self.version = product.version
        self.created_at = product.created_at
        self.updated_at = product.updated_at

    @classmethod
    def from_domain(cls, product: Product, url_builder: Optional[UrlBuilder] = None) -> 'ProductDTO':
        return cls(product, url_builder)

    @property
    def total_stock(self) -> int:
        return sum(v.stock_quantity for v in self.variants if v.is_active)

    def to_dict(self) -> Dict[str, Any]:
        """
        将DTO转换为字典。

        Returns:
            字典表示
        """
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "base_price": self.base_price.to_dict(),
            "sku": self.sku,
            "is_active": self.is_active,
            "metadata": to_primitive(self.metadata),
            "category_ids": self.category_ids,
            "attributes": to_primitive(self.attributes),
            "images": [i.to_dict() for i in self.images],
            "variants": [v.to_dict() for v in self.variants],
            "total_stock": self.total_stock,
            "version": self.version,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class SearchIndexRebuildDTO:
    """搜索索引重建结果"""

    def __init__(self, products_indexed: int, indexed_at, duration_ms: int):
        self.products_indexed = products_indexed
        self.indexed_at = indexed_at
        self.duration_ms = duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products_indexed": self.products_indexed,
            "indexed_at": _iso(self.indexed_at),
            "duration_ms": self.duration_ms,
        }
