"""
商品搜索值对象。
封装搜索条件、分面和搜索结果，搜索的具体实现由基础设施层提供。
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

# 排序字段：relevance按关键词命中排序，无关键词时按创建时间倒序
SEARCH_SORT_OPTIONS = ("relevance", "name", "price", "created", "updated", "stock")


class SearchCriteria:
    """
    商品搜索条件。

    同一属性的多个值之间是“或”关系，不同属性之间是“且”关系；多个分类之间是“或”关系。
    """

    def __init__(
        self,
        keyword: str = "",
        category_ids: Optional[Sequence[Any]] = None,
        category_slugs: Optional[Sequence[str]] = None,
        attribute_filters: Optional[Dict[str, Sequence[str]]] = None,
        price_min: Optional[Decimal] = None,
        price_max: Optional[Decimal] = None,
        in_stock_only: bool = False,
        active_only: bool = True,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "relevance",
        sort_descending: bool = False
    ):
        self.keyword = (keyword or "").strip()
        self.category_ids = [str(i) for i in category_ids or []]
        self.category_slugs = [s.strip().lower() for s in category_slugs or [] if s and s.strip()]
        self.attribute_filters = {
            name.strip().lower(): [str(v) for v in values]
            for name, values in (attribute_filters or {}).items()
            if name and name.strip() and values
        }
        self.price_min = price_min
        self.price_max = price_max
        self.in_stock_only = in_stock_only
        self.active_only = active_only
        self.page = max(1, page)
        self.page_size = min(100, max(1, page_size))
        self.sort_by = sort_by if sort_by in SEARCH_SORT_OPTIONS else "relevance"
        self.sort_descending = sort_descending

    def cache_key(self) -> str:
        """生成缓存键，过滤条件按名称排序保证同一条件得到同一个键"""
        attributes = ";".join(
            f"{name}={','.join(sorted(values))}" for name, values in sorted(self.attribute_filters.items())
        )
        return ":".join([
            "search:products",
            self.keyword.lower(),
            ",".join(sorted(self.category_ids)),
            ",".join(sorted(self.category_slugs)),
            attributes,
            str(self.price_min if self.price_min is not None else ""),
            str(self.price_max if self.price_max is not None else ""),
            str(int(self.in_stock_only)),
            str(int(self.active_only)),
            f"{self.page}:{self.page_size}",
            f"{self.sort_by}:{int(self.sort_descending)}",
        ])


class SearchFacets:
    """
    搜索分面。
    分类和属性值按命中商品数统计，价格区间为命中商品的最低价和最高价。
    """

    def __init__(
        self,
        categories: Optional[List[Dict[str, Any]]] = None,
        attributes: Optional[List[Dict[str, Any]]] = None,
        price_min: Optional[Decimal] = None,
        price_max: Optional[Decimal] = None
    ):
        self.categories = categories or []
        self.attributes = attributes or []
        self.price_min = price_min
        self.price_max = price_max

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": self.categories,
            "attributes": self.attributes,
            "price_range": {
                "min": str(self.price_min) if self.price_min is not None else None,
                "max": str(self.price_max) if self.price_max is not None else None,
            },
        }


class SearchResult:
    """商品搜索结果"""

    def __init__(
        self,
        items: List[Dict[str, Any]],
        total: int,
        page: int,
        page_size: int,
        facets: Optional[SearchFacets] = None,
        query: str = ""
    ):
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size
        self.facets = facets or SearchFacets()
        self.query = query

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "facets": self.facets.to_dict(),
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
            "hasPrevious": self.has_previous,
            "hasNext": self.has_next,
            "query": self.query,
        }
