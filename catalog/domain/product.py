"""
商品聚合根。
商品聚合包含商品本身、商品变体、商品图片、分类关联和属性值。
变体只能通过商品聚合根修改，变体的事件也由商品聚合根记录。
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    DuplicateEntityException,
    Entity,
    EntityNotFoundException,
    InsufficientStockException,
    Money,
    Slug,
    ValidationException,
    ValueObject,
)
from catalog.domain.attribute import Attribute
from catalog.domain.events import (
    ProductCategoryAddedEvent,
    ProductCategoryRemovedEvent,
    ProductCreatedEvent,
    ProductDeletedEvent,
    ProductImageAddedEvent,
    ProductImageRemovedEvent,
    ProductStatusChangedEvent,
    ProductUpdatedEvent,
    ProductVariantAddedEvent,
    ProductVariantDeletedEvent,
    ProductVariantStockChangedEvent,
    ProductVariantUpdatedEvent,
)

NAME_MAX_LENGTH = 255
SKU_MAX_LENGTH = 100


def _validate_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationException("name", "商品名称不能为空")
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationException("name", f"商品名称不能超过{NAME_MAX_LENGTH}个字符")
    return name


def _normalize_sku(sku: Optional[str]) -> Optional[str]:
    if sku is None or not str(sku).strip():
        return None
    sku = str(sku).strip()
    if len(sku) > SKU_MAX_LENGTH:
        raise ValidationException("sku", f"SKU不能超过{SKU_MAX_LENGTH}个字符")
    return sku


class ProductImage(ValueObject):
    """商品图片，image_key为对象存储中的键"""

    def __init__(self, image_key: str, alt_text: str = "", is_default: bool = False, display_order: int = 0):
        if not image_key:
            raise ValidationException("image_key", "图片键不能为空")
        self.image_key = image_key
        self.alt_text = alt_text or ""
        self.is_default = is_default
        self.display_order = display_order

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image_key": self.image_key,
            "alt_text": self.alt_text,
            "is_default": self.is_default,
            "display_order": self.display_order,
        }


class ImageCollection:
    """
    图片集合。
    保证最多一张默认图片；第一张加入的图片自动成为默认图片。
    """

    def __init__(self, images: Optional[List[ProductImage]] = None):
        self._images: List[ProductImage] = sorted(images or [], key=lambda i: i.display_order)

    def __iter__(self):
        return iter(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def list(self) -> List[ProductImage]:
        return list(self._images)

    def find(self, image_key: str) -> Optional[ProductImage]:
        return next((i for i in self._images if i.image_key == image_key), None)

    @property
    def default(self) -> Optional[ProductImage]:
        return next((i for i in self._images if i.is_default), None)

    def add(self, image_key: str, alt_text: str = "", is_default: bool = False,
            display_order: Optional[int] = None) -> ProductImage:
        if self.find(image_key):
            raise DuplicateEntityException("ProductImage", "image_key", image_key)
        if display_order is None:
            display_order = max((i.display_order for i in self._images), default=-1) + 1
        make_default = is_default or not self._images
        if make_default:
            self._images = [self._replace(i, is_default=False) for i in self._images]
        image = ProductImage(image_key, alt_text, make_default, display_order)
        self._images.append(image)
        self._images.sort(key=lambda i: i.display_order)
        return image

    def remove(self, image_key: str) -> ProductImage:
        image = self.find(image_key)
        if image is None:
            raise EntityNotFoundException("ProductImage", image_key)
        self._images = [i for i in self._images if i.image_key != image_key]
        if image.is_default and self._images:
            self._images[0] = self._replace(self._images[0], is_default=True)
        return image

    def set_default(self, image_key: str) -> None:
        if self.find(image_key) is None:
            raise EntityNotFoundException("ProductImage", image_key)
        self._images = [self._replace(i, is_default=i.image_key == image_key) for i in self._images]

    def reorder(self, orders: Dict[str, int]) -> None:
        self._images = [
            self._replace(i, display_order=orders.get(i.image_key, i.display_order)) for i in self._images
        ]
        self._images.sort(key=lambda i: i.display_order)

    @staticmethod
    def _replace(image: ProductImage, **changes: Any) -> ProductImage:
        values = image.to_dict()
        values.update(changes)
        return ProductImage(**values)


class ProductVariant(Entity):
    """
    商品变体实体。
    价格为空时使用商品的基础价格；变体属性只能引用标记为变体属性的属性。
    """

    def __init__(
        self,
        id: Any = None,
        product_id: Any = None,
        sku: Optional[str] = None,
        price: Optional[Money] = None,
        stock_quantity: int = 0,
        is_active: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
        attributes: Optional[Dict[str, Any]] = None,
        images: Optional[List[ProductImage]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at, updated_at)
        self.product_id = product_id
        self.sku = sku
        self.price = price
        self.stock_quantity = stock_quantity
        self.is_active = is_active
        self.metadata = metadata or {}
        self.attributes: Dict[str, Any] = attributes or {}
        self.images = ImageCollection(images)

    def effective_price(self, base_price: Money) -> Money:
        return self.price if self.price is not None else base_price

    def has_stock(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity


class Product(AggregateRoot):
    """商品聚合根"""

    def __init__(
        self,
        id: Any = None,
        name: str = "",
        slug: Optional[Slug] = None,
        base_price: Optional[Money] = None,
        description: Optional[str] = None,
        sku: Optional[str] = None,
        is_active: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
        category_ids: Optional[List[Any]] = None,
        attributes: Optional[Dict[str, Any]] = None,
        images: Optional[List[ProductImage]] = None,
        variants: Optional[List[ProductVariant]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.name = name
        self.slug = slug
        self.base_price = base_price
        self.description = description
        self.sku = sku
        self.is_active = is_active
        self.metadata = metadata or {}
        self.category_ids: List[Any] = list(category_ids or [])
        self.attributes: Dict[str, Any] = attributes or {}
        self.images = ImageCollection(images)
        self._variants: List[ProductVariant] = list(variants or [])

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        base_price: Money,
        description: Optional[str] = None,
        sku: Optional[str] = None,
        is_active: bool = True
    ) -> 'Product':
        """
        创建商品。

        Args:
            name: 商品名称
            slug: 商品别名
            base_price: 基础价格
            description: 描述
            sku: 商品SKU
            is_active: 是否上架

        Returns:
            新建的商品

        Raises:
            ValidationException: 名称、别名或价格无效
        """
        if base_price is None:
            raise ValidationException("base_price", "基础价格不能为空")
        product = cls(
            name=_validate_name(name),
            slug=Slug(slug),
            base_price=base_price,
            description=description,
            sku=_normalize_sku(sku),
            is_active=is_active,
        )
        product.add_domain_event(ProductCreatedEvent(product.id))
        return product

    # ==================== 基本信息 ====================

    def update(self, name: str, slug: str, base_price: Money,
               description: Optional[str] = None, sku: Optional[str] = None) -> None:
        if base_price is None:
            raise ValidationException("base_price", "基础价格不能为空")
        self.name = _validate_name(name)
        self.slug = Slug(slug)
        self.base_price = base_price
        self.description = description
        self.sku = _normalize_sku(sku)
        self.add_domain_event(ProductUpdatedEvent(self.id))

    def activate(self) -> None:
        if self.is_active:
            return
        self.is_active = True
        self.add_domain_event(ProductStatusChangedEvent(self.id, True))

    def deactivate(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        self.add_domain_event(ProductStatusChangedEvent(self.id, False))

    def set_metadata(self, key: str, value: Any) -> None:
        if not key or not key.strip():
            raise ValidationException("metadata", "元数据键不能为空")
        self.update_metadata(key, value)
        self.add_domain_event(ProductUpdatedEvent(self.id))

    # ==================== 分类与属性 ====================

    def add_category(self, category_id: Any) -> None:
        if category_id in self.category_ids:
            return
        self.category_ids.append(category_id)
        self.add_domain_event(ProductCategoryAddedEvent(self.id, category_id))

    def remove_category(self, category_id: Any) -> None:
        if category_id not in self.category_ids:
            raise EntityNotFoundException("Category", category_id)
        self.category_ids.remove(category_id)
        self.add_domain_event(ProductCategoryRemovedEvent(self.id, category_id))

    def set_categories(self, category_ids: List[Any]) -> None:
        """将商品分类调整为给定的分类集合"""
        for category_id in [c for c in self.category_ids if c not in category_ids]:
            self.remove_category(category_id)
        for category_id in category_ids:
            self.add_category(category_id)

    def set_attribute(self, attribute: Attribute, value: Any) -> None:
        self.attributes[str(attribute.id)] = value
        self.touch()

    def remove_attribute(self, attribute_id: Any) -> None:
        self.attributes.pop(str(attribute_id), None)
        self.touch()

    # ==================== 图片 ====================

    def add_image(self, image_key: str, alt_text: str = "", is_default: bool = False,
                  display_order: Optional[int] = None) -> ProductImage:
        image = self.images.add(image_key, alt_text, is_default, display_order)
        self.add_domain_event(ProductImageAddedEvent(self.id, image_key))
        return image

    def remove_image(self, image_key: str) -> ProductImage:
        image = self.images.remove(image_key)
        self.add_domain_event(ProductImageRemovedEvent(self.id, image_key))
        return image

    def set_default_image(self, image_key: str) -> None:
        self.images.set_default(image_key)
        self.add_domain_event(ProductUpdatedEvent(self.id))

    def reorder_images(self, orders: Dict[str, int]) -> None:
        self.images.reorder(orders)
        self.add_domain_event(ProductUpdatedEvent(self.id))

    # ==================== 变体 ====================

    @property
    def variants(self) -> List[ProductVariant]:
        return list(self._variants)

    def get_variant(self, variant_id: Any) -> ProductVariant:
        """
        获取变体。

        Raises:
            EntityNotFoundException: 变体不属于该商品
        """
        variant = next((v for v in self._variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise EntityNotFoundException("ProductVariant", variant_id)
        return variant

    def _ensure_unique_variant_sku(self, sku: Optional[str], exclude_id: Any = None) -> None:
        if sku and any(v.sku == sku and v.id != exclude_id for v in self._variants):
            raise DuplicateEntityException("ProductVariant", "sku", sku)

    @staticmethod
    def _ensure_variant_attribute(attribute: Attribute) -> None:
        if not attribute.is_variant:
            raise BusinessRuleViolationException(
                "ProductVariant.NonVariantAttribute",
                f"属性'{attribute.name}'不是变体属性"
            )

    def add_variant(
        self,
        sku: Optional[str] = None,
        price: Optional[Money] = None,
        stock_quantity: int = 0,
        is_active: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
        attributes: Optional[List[tuple]] = None
    ) -> ProductVariant:
        """
        添加变体。

        Args:
            sku: 变体SKU，在商品内唯一
            price: 变体价格，为空时使用商品基础价格
            stock_quantity: 初始库存，不能为负
            is_active: 是否启用
            metadata: 元数据
            attributes: (属性, 值)元组列表，属性必须是变体属性

        Returns:
            新建的变体

        Raises:
            ValidationException: 库存为负
            DuplicateEntityException: SKU重复
            BusinessRuleViolationException: 使用了非变体属性
        """
        if stock_quantity < 0:
            raise ValidationException("stock_quantity", "库存不能为负数")
        sku = _normalize_sku(sku)
        self._ensure_unique_variant_sku(sku)

        variant = ProductVariant(
            product_id=self.id,
            sku=sku,
            price=price,
            stock_quantity=stock_quantity,
            is_active=is_active,
            metadata=dict(metadata or {}),
        )
        for attribute, value in attributes or []:
            self._ensure_variant_attribute(attribute)
            variant.attributes[str(attribute.id)] = value

        self._variants.append(variant)
        self.add_domain_event(ProductVariantAddedEvent(self.id, variant.id))
        return variant

    def update_variant(self, variant_id: Any, sku: Optional[str], price: Optional[Money],
                       metadata: Optional[Dict[str, Any]] = None) -> ProductVariant:
        variant = self.get_variant(variant_id)
        sku = _normalize_sku(sku)
        self._ensure_unique_variant_sku(sku, exclude_id=variant.id)
        variant.sku = sku
        variant.price = price
        if metadata is not None:
            variant.metadata = dict(metadata)
        variant.touch()
        self.add_domain_event(ProductVariantUpdatedEvent(self.id, variant.id))
        return variant

    def set_variant_attribute(self, variant_id: Any, attribute: Attribute, value: Any) -> None:
        variant = self.get_variant(variant_id)
        self._ensure_variant_attribute(attribute)
        variant.attributes[str(attribute.id)] = value
        variant.touch()
        self.add_domain_event(ProductVariantUpdatedEvent(self.id, variant.id))

    def activate_variant(self, variant_id: Any) -> None:
        variant = self.get_variant(variant_id)
        if not variant.is_active:
            variant.is_active = True
            variant.touch()
            self.add_domain_event(ProductVariantUpdatedEvent(self.id, variant.id))

    def deactivate_variant(self, variant_id: Any) -> None:
        variant = self.get_variant(variant_id)
        if variant.is_active:
            variant.is_active = False
            variant.touch()
            self.add_domain_event(ProductVariantUpdatedEvent(self.id, variant.id))

    def _change_stock(self, variant: ProductVariant, new_quantity: int) -> None:
        old_quantity = variant.stock_quantity
        variant.stock_quantity = new_quantity
        variant.touch()
        self.add_domain_event(ProductVariantStockChangedEvent(self.id, variant.id, old_quantity, new_quantity))

    def set_variant_stock(self, variant_id: Any, quantity: int) -> None:
        if quantity < 0:
            raise ValidationException("stock_quantity", "库存不能为负数")
        self._change_stock(self.get_variant(variant_id), quantity)

    def add_variant_stock(self, variant_id: Any, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationException("quantity", "增加的库存数量必须大于0")
        variant = self.get_variant(variant_id)
        self._change_stock(variant, variant.stock_quantity + quantity)

    def remove_variant_stock(self, variant_id: Any, quantity: int) -> None:
        """
        扣减变体库存。

        Raises:
            InsufficientStockException: 扣减数量超过现有库存
        """
        if quantity <= 0:
            raise ValidationException("quantity", "扣减的库存数量必须大于0")
        variant = self.get_variant(variant_id)
        if variant.stock_quantity < quantity:
            raise InsufficientStockException(variant.id, quantity, variant.stock_quantity)
        self._change_stock(variant, variant.stock_quantity - quantity)

    def add_variant_image(self, variant_id: Any, image_key: str, alt_text: str = "",
                          is_default: bool = False, display_order: Optional[int] = None) -> ProductImage:
        variant = self.get_variant(variant_id)
        image = variant.images.add(image_key, alt_text, is_default, display_order)
        self.add_domain_event(ProductImageAddedEvent(self.id, image_key, variant.id))
        return image

    def remove_variant_image(self, variant_id: Any, image_key: str) -> ProductImage:
        variant = self.get_variant(variant_id)
        image = variant.images.remove(image_key)
        self.add_domain_event(ProductImageRemovedEvent(self.id, image_key, variant.id))
        return image

    def remove_variant(self, variant_id: Any) -> ProductVariant:
        variant = self.get_variant(variant_id)
        self._variants.remove(variant)
        self.add_domain_event(ProductVariantDeletedEvent(self.id, variant.id))
        return variant

    # ==================== 删除 ====================

    def all_image_keys(self) -> List[str]:
        keys = [i.image_key for i in self.images]
        for variant in self._variants:
            keys.extend(i.image_key for i in variant.images)
        return keys

    def mark_deleted(self) -> None:
        for variant in self._variants:
            self.add_domain_event(ProductVariantDeletedEvent(self.id, variant.id))
        self.add_domain_event(ProductDeletedEvent(self.id))
