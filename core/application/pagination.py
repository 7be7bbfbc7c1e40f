"""
分页与数据表查询模块。
定义分页结果以及遵循DataTables协议的请求和结果对象。
"""
import math
from typing import Any, Dict, List, Optional

from core.domain.exceptions import ValidationException


class PaginatedResult:
    """分页结果"""

    def __init__(self, items: List[Any], total: int, page: int, page_size: int):
        """
        初始化分页结果。

        Args:
            items: 当前页的数据项
            total: 总记录数
            page: 当前页码，从1开始
            page_size: 每页大小
        """
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.items],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
            "hasPrevious": self.has_previous,
            "hasNext": self.has_next,
        }


def normalize_page(page: Any, page_size: Any, max_page_size: int = 100) -> tuple:
    """
    规范化分页参数。

    Args:
        page: 页码
        page_size: 每页大小
        max_page_size: 每页大小上限

    Returns:
        (页码, 每页大小)元组，页码至少为1，每页大小在1到上限之间
    """
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = 20
    return max(1, page), min(max_page_size, max(1, page_size))


def _parse_int(value: Any, field: str, default: int, min_value: int = 0) -> int:
    """解析数据表请求中的整数参数，空值使用默认值"""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationException(field, "必须是整数")
    if number < min_value:
        raise ValidationException(field, f"不能小于{min_value}")
    return number


def _as_list(value: Any, field: str) -> List[Dict[str, Any]]:
    if not value:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValidationException(field, "必须是对象数组")
    return value


class DataTableColumn:
    """数据表列定义"""

    def __init__(self, data: str, name: str = "", searchable: bool = True, orderable: bool = True):
        self.data = data
        self.name = name or data
        self.searchable = searchable
        self.orderable = orderable


class DataTableOrder:
    """数据表排序定义"""

    def __init__(self, column: int, dir: str = "asc"):
        self.column = column
        self.dir = "desc" if str(dir).lower() == "desc" else "asc"


class DataTableRequest:
    """
    数据表查询请求。
    对应DataTables协议的draw、start、length、search、order和columns参数。
    """

    def __init__(
        self,
        draw: int = 1,
        start: int = 0,
        length: int = 10,
        search: str = "",
        order: Optional[List[DataTableOrder]] = None,
        columns: Optional[List[DataTableColumn]] = None
    ):
        self.draw = draw
        self.start = max(0, start)
        self.length = length
        self.search = (search or "").strip()
        self.order = order or []
        self.columns = columns or []

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DataTableRequest':
        """
        从请求数据创建数据表请求。

        Args:
            data: 请求体，字段遵循DataTables协议

        Returns:
            数据表请求

        Raises:
            ValidationException: 数值参数无法解析或结构不正确
        """
        search = data.get("search") or {}
        if isinstance(search, dict):
            search_value = search.get("value", "")
        else:
            search_value = str(search)

        raw_columns = _as_list(data.get("columns"), "columns")
        raw_order = _as_list(data.get("order"), "order")
        columns = [
            DataTableColumn(
                data=str(column.get("data", "")),
                name=str(column.get("name", "") or ""),
                searchable=bool(column.get("searchable", True)),
                orderable=bool(column.get("orderable", True)),
            )
            for column in raw_columns
        ]
        order = [
            DataTableOrder(column=_parse_int(item.get("column"), "order", 0), dir=item.get("dir", "asc"))
            for item in raw_order
        ]
        return cls(
            draw=_parse_int(data.get("draw"), "draw", 1),
            start=_parse_int(data.get("start"), "start", 0),
            length=_parse_int(data.get("length"), "length", 10, min_value=-1),
            search=search_value,
            order=order,
            columns=columns,
        )

    def ordering(self) -> List[tuple]:
        """
        获取排序列及方向。

        Returns:
            (列数据名, 是否降序)的列表，忽略越界或不可排序的列
        """
        result = []
        for item in self.order:
            if 0 <= item.column < len(self.columns):
                column = self.columns[item.column]
                if column.orderable:
                    result.append((column.data, item.dir == "desc"))
        return result


class DataTableResult:
    """数据表查询结果"""

    def __init__(self, draw: int, records_total: int, records_filtered: int, data: List[Any]):
        self.draw = draw
        self.records_total = records_total
        self.records_filtered = records_filtered
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draw": self.draw,
            "recordsTotal": self.records_total,
            "recordsFiltered": self.records_filtered,
            "data": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.data],
        }
