"""
商品目录领域的仓储接口。
定义用于持久化和检索分类、属性和商品聚合根的仓储接口。
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from core.domain.repositories import PaginatedRepository
from catalog.domain.attribute import Attribute
from catalog.domain.category import Category
from catalog.domain.product import Product
from catalog.domain.search import SearchCriteria, SearchResult


class CategoryRepository(PaginatedRepository[Category]):
    """
    分类仓储接口。
    """

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Category]:
        """
        根据别名获取分类。

        Args:
            slug: 分类别名

        Returns:
            找到的分类，如果不存在则返回None
        """
        pass

    @abstractmethod
    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        pass

    @abstractmethod
    def get_all(self) -> List[Category]:
        pass

    @abstractmethod
    def get_roots(self) -> List[Category]:
        pass

    @abstractmethod
    def get_children(self, parent_id: Any) -> List[Category]:
        pass

    @abstractmethod
    def get_descendants(self, category: Category) -> List[Category]:
        """
        获取分类的全部后代分类，按路径前缀匹配。

        Args:
            category: 祖先分类

        Returns:
            后代分类列表
        """
        pass

    @abstractmethod
    def has_children(self, category_id: Any) -> bool:
        pass

    @abstractmethod
    def count_products(self, category_id: Any) -> int:
        pass


class AttributeRepository(PaginatedRepository[Attribute]):
    """
    属性仓储接口。
    """

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Attribute]:
        pass

    @abstractmethod
    def name_exists(self, name: str, exclude_id: Any = None) -> bool:
        pass

    @abstractmethod
    def get_all(self) -> List[Attribute]:
        pass

    @abstractmethod
    def get_variant_attributes(self) -> List[Attribute]:
        pass

    @abstractmethod
    def get_by_ids(self, ids: List[Any]) -> Dict[str, Attribute]:
        """
        批量获取属性。

        Args:
            ids: 属性ID列表

        Returns:
            以ID字符串为键的属性字典，不存在的ID不出现在结果中
        """
        pass


class ProductRepository(PaginatedRepository[Product]):
    """
    商品仓储接口。
    商品聚合包含变体和图片，保存时一并持久化。
    """

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Product]:
        pass

    @abstractmethod
    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        pass

    @abstractmethod
    def sku_exists(self, sku: str, exclude_id: Any = None) -> bool:
        """判断商品SKU是否已被其他商品使用"""
        pass

    @abstractmethod
    def variant_sku_exists(self, sku: str, exclude_variant_id: Any = None) -> bool:
        """判断变体SKU是否已被任一商品的变体使用"""
        pass

    @abstractmethod
    def get_by_variant_id(self, variant_id: Any) -> Optional[Product]:
        """
        根据变体ID获取所属商品。

        Args:
            variant_id: 变体ID

        Returns:
            包含该变体的商品，如果不存在则返回None
        """
        pass

    @abstractmethod
    def get_by_variant_sku(self, sku: str) -> Optional[Product]:
        pass

    @abstractmethod
    def search(
        self,
        search: Optional[str] = None,
        category_id: Any = None,
        min_price: Any = None,
        max_price: Any = None,
        active_only: bool = False,
        in_stock_only: bool = False,
        sort_by: str = "created_at",
        sort_desc: bool = True,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Product], int]:
        """
        按条件分页查询商品。

        Args:
            search: 在名称、描述和SKU中匹配的文本
            category_id: 分类ID
            min_price: 最低基础价格
            max_price: 最高基础价格
            active_only: 只返回上架商品
            in_stock_only: 只返回有库存变体的商品
            sort_by: 排序字段，name、base_price、created_at或updated_at
            sort_desc: 是否降序
            page: 页码
            page_size: 每页大小

        Returns:
            商品列表和总数的元组
        """
        pass


class ProductSearchService(ABC):
    """
    商品搜索服务接口。
    维护商品的搜索索引，并提供带分面统计的搜索。
    """

    @abstractmethod
    def search(self, criteria: SearchCriteria) -> SearchResult:
        """
        搜索商品。

        Args:
            criteria: 搜索条件

        Returns:
            当前页结果和基于全部命中商品计算的分面
        """
        pass

    @abstractmethod
    def index_product(self, product_id: Any) -> bool:
        """
        重建单个商品的索引，商品已不存在时移除其索引。

        Returns:
            商品是否仍在索引中
        """
        pass

    @abstractmethod
    def index_category_products(self, category_id: Any) -> int:
        pass

    @abstractmethod
    def index_attribute_products(self, attribute_id: Any) -> int:
        pass

    @abstractmethod
    def rebuild_index(self, clear_existing: bool = True) -> int:
        """
        为全部商品重建索引。

        Args:
            clear_existing: 是否先清空已有索引

        Returns:
            已索引的商品数
        """
        pass
