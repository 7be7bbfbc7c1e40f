"""
应用层公共组件包。
提供应用服务基类、结果转换装饰器以及分页和数据表查询对象。
"""

from core.application.services import ApplicationService, service_operation
from core.application.pagination import (
    PaginatedResult,
    DataTableColumn,
    DataTableOrder,
    DataTableRequest,
    DataTableResult,
    normalize_page,
)

__all__ = [
    'ApplicationService',
    'service_operation',
    'PaginatedResult',
    'DataTableColumn',
    'DataTableOrder',
    'DataTableRequest',
    'DataTableResult',
    'normalize_page',
]
