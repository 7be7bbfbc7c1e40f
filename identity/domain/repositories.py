"""
身份领域的仓储接口。
"""
from abc import abstractmethod
from typing import Any, Optional

from core.domain.repositories import PaginatedRepository
from identity.domain.user import User


class UserRepository(PaginatedRepository[User]):
    """
    用户仓储接口。
    用户聚合连同其刷新令牌一起加载和保存。
    """

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """
        根据邮箱获取用户，邮箱不区分大小写。

        Args:
            email: 邮箱地址

        Returns:
            找到的用户，如果不存在则返回None
        """
        pass

    @abstractmethod
    def email_exists(self, email: str, exclude_id: Any = None) -> bool:
        pass

    @abstractmethod
    def get_by_refresh_token(self, token: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_verification_token(self, token: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_reset_token(self, token: str) -> Optional[User]:
        pass
