"""
购物车与订单仓储接口。
"""
from abc import abstractmethod
from typing import Any, List, Optional, Tuple

from core.domain import PaginatedRepository, Repository
from sales.domain.cart import Cart
from sales.domain.order import Order


class CartRepository(Repository[Cart]):

    @abstractmethod
    def get_by_user(self, user_id: Any) -> Optional[Cart]:
        """获取用户最近更新的购物车"""
        pass


class OrderRepository(PaginatedRepository[Order]):

    @abstractmethod
    def get_by_user(self, user_id: Any, page: int = 1, page_size: int = 20) -> Tuple[List[Order], int]:
        """分页获取用户的订单，按创建时间倒序"""
        pass

    @abstractmethod
    def get_recent(self, count: int = 10) -> List[Order]:
        pass
