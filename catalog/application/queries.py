"""
商品目录应用服务层的查询对象。
定义用于查询系统状态的查询。
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

SORT_DIRECTIONS = ("asc", "desc")


@dataclass
class ListCategoriesQuery:
    """分页获取分类的查询"""
    page: int = 1
    page_size: int = 20
    parent_id: Optional[Any] = None
    active_only: bool = False


@dataclass
class ListAttributesQuery:
    page: int = 1
    page_size: int = 20
    is_variant: Optional[bool] = None


@dataclass
class ListProductsQuery:
    """
    获取商品列表的查询。

    sort_by可选name、base_price、created_at、updated_at；sort_direction为asc或desc。
    """
    page: int = 1
    page_size: int = 20
    search: Optional[str] = None
    category_id: Optional[Any] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    active_only: bool = False
    in_stock_only: bool = False
    sort_by: str = "created_at"
    sort_direction: str = "desc"

    @property
    def sort_desc(self) -> bool:
        return self.sort_direction.lower() != "asc"

    def cache_key(self) -> str:
        return (
            f"products:list:{self.page}:{self.page_size}:{self.search or ''}:{self.category_id or ''}:"
            f"{self.min_price or ''}:{self.max_price or ''}:{int(self.active_only)}:{int(self.in_stock_only)}:"
            f"{self.sort_by}:{self.sort_direction}"
        )


@dataclass
class SearchProductsQuery:
    """
    商品搜索查询。

    attribute_filters为属性名到可接受值列表的映射；sort_by可选relevance、name、price、created、updated、stock。
    """
    keyword: str = ""
    category_ids: List[Any] = field(default_factory=list)
    category_slugs: List[str] = field(default_factory=list)
    attribute_filters: Dict[str, List[str]] = field(default_factory=dict)
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    in_stock_only: bool = False
    active_only: bool = True
    page: int = 1
    page_size: int = 20
    sort_by: str = "relevance"
    sort_descending: bool = False
