"""
仓储接口模块。
定义仓储接口，用于持久化和检索领域对象。
"""
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Tuple, TypeVar

T = TypeVar('T')


class Repository(Generic[T], ABC):
    """
    仓储接口。
    定义了所有仓储必须实现的基本操作。
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """
        根据ID获取聚合。

        Args:
            id: 聚合ID

        Returns:
            找到的聚合，如果不存在则返回None
        """
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """
        保存聚合。
        如果聚合已存在则更新，否则创建。保存后发布聚合中待发布的领域事件。

        Args:
            entity: 要保存的聚合

        Returns:
            保存后的聚合

        Raises:
            ConcurrencyException: 聚合版本与数据库中的版本不一致时抛出
        """
        pass

    @abstractmethod
    def delete(self, entity: T) -> None:
        """
        删除聚合，并发布聚合中待发布的领域事件。

        Args:
            entity: 要删除的聚合
        """
        pass


class PaginatedRepository(Repository[T], ABC):
    """
    支持分页与表格查询的仓储接口。
    """

    @abstractmethod
    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[T], int]:
        """
        分页获取聚合。

        Args:
            page: 页码，从1开始
            page_size: 每页大小
            filters: 过滤条件

        Returns:
            聚合列表和总数的元组
        """
        pass

    @abstractmethod
    def datatable(self, request: Any) -> Tuple[List[T], int, int]:
        """
        按DataTables协议查询聚合。

        Args:
            request: DataTableRequest

        Returns:
            当前页的聚合列表、记录总数和过滤后记录数的元组
        """
        pass
