"""
商品目录应用服务层的命令对象。
定义用于修改系统状态的命令。
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


# ==================== 分类 ====================

@dataclass
class CreateCategoryCommand:
    """创建分类命令"""
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[Any] = None


@dataclass
class UpdateCategoryCommand:
    """更新分类命令"""
    id: Any
    name: str
    slug: str
    description: Optional[str] = None


@dataclass
class UpdateCategoryParentCommand:
    """调整父分类命令，parent_id为空时移动为根分类"""
    id: Any
    parent_id: Optional[Any] = None


@dataclass
class ChangeCategoryStatusCommand:
    id: Any
    is_active: bool


@dataclass
class DeleteCategoryCommand:
    id: Any


# ==================== 属性 ====================

@dataclass
class CreateAttributeCommand:
    """创建属性命令"""
    name: str
    display_name: str
    type: str
    configuration: Dict[str, Any] = field(default_factory=dict)
    filterable: bool = False
    searchable: bool = False
    is_variant: bool = False


@dataclass
class UpdateAttributeCommand:
    """更新属性命令，为None的字段保持不变"""
    id: Any
    display_name: str
    configuration: Optional[Dict[str, Any]] = None
    filterable: Optional[bool] = None
    searchable: Optional[bool] = None
    is_variant: Optional[bool] = None


@dataclass
class DeleteAttributeCommand:
    id: Any


# ==================== 商品 ====================

@dataclass
class CreateProductCommand:
    """
    创建商品命令。

    attributes为属性ID到属性值的映射。
    """
    name: str
    slug: str
    base_price: Decimal
    currency: str = "USD"
    description: Optional[str] = None
    sku: Optional[str] = None
    is_active: bool = True
    category_ids: List[Any] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateProductCommand:
    """更新商品命令，category_ids和attributes为None时保持不变"""
    id: Any
    name: str
    slug: str
    base_price: Decimal
    currency: str = "USD"
    description: Optional[str] = None
    sku: Optional[str] = None
    category_ids: Optional[List[Any]] = None
    attributes: Optional[Dict[str, Any]] = None


@dataclass
class ChangeProductStatusCommand:
    id: Any
    is_active: bool


@dataclass
class DeleteProductCommand:
    id: Any


@dataclass
class AddProductVariantCommand:
    """添加商品变体命令，price为空时使用商品基础价格"""
    product_id: Any
    sku: Optional[str] = None
    price: Optional[Decimal] = None
    stock_quantity: int = 0
    is_active: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateProductVariantCommand:
    variant_id: Any
    sku: Optional[str] = None
    price: Optional[Decimal] = None
    metadata: Optional[Dict[str, Any]] = None
    attributes: Optional[Dict[str, Any]] = None


@dataclass
class ChangeVariantStatusCommand:
    variant_id: Any
    is_active: bool


@dataclass
class UpdateVariantStockCommand:
    """
    更新变体库存命令。

    operation为set时把库存设为quantity；add和remove分别增加或扣减quantity。
    """
    variant_id: Any
    quantity: int
    operation: str = "set"


@dataclass
class DeleteProductVariantCommand:
    variant_id: Any


@dataclass
class UploadProductImageCommand:
    """上传商品图片命令，variant_id不为空时图片属于该变体"""
    product_id: Any
    content: Any
    filename: str
    content_type: str
    size: int = 0
    alt_text: str = ""
    is_default: bool = False
    display_order: Optional[int] = None
    variant_id: Optional[Any] = None


@dataclass
class RemoveProductImageCommand:
    product_id: Any
    image_key: str
    variant_id: Optional[Any] = None


@dataclass
class SetDefaultProductImageCommand:
    product_id: Any
    image_key: str


@dataclass
class ReorderProductImagesCommand:
    """调整商品图片显示顺序，orders为图片键到显示序号的映射"""
    product_id: Any
    orders: Dict[str, int] = field(default_factory=dict)


@dataclass
class RebuildSearchIndexCommand:
    """重建商品搜索索引，clear_existing为False时只覆盖现有商品的索引"""
    clear_existing: bool = True
