"""
配送领域的仓储接口。
"""
from abc import abstractmethod
from typing import Any, List, Optional

from core.domain.repositories import Repository
from shipping.domain.address import Address


class AddressRepository(Repository[Address]):
    """
    地址仓储接口。
    """

    @abstractmethod
    def get_by_user(self, user_id: Any) -> List[Address]:
        """
        获取用户的全部地址，默认地址排在前面。

        Args:
            user_id: 用户ID

        Returns:
            地址列表
        """
        pass

    @abstractmethod
    def get_default(self, user_id: Any, address_type: str) -> Optional[Address]:
        """获取用户可用作指定类型的默认地址"""
        pass

    @abstractmethod
    def count_by_user(self, user_id: Any) -> int:
        pass
