"""
统一响应封装模块。
提供API响应的标准化结构，包括业务状态码、成功标志、消息、数据等。
"""
import time
import uuid
import typing as t
from dataclasses import dataclass, field

from rest_framework.response import Response
from rest_framework import status as http_status

from core.domain.results import Error, ErrorType


@dataclass
class ApiResponse:
    """API响应数据结构"""
    code: int = 10000  # 业务状态码
    success: bool = True
    message: str = "操作成功"
    data: t.Any = None
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))  # 毫秒
    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metadata: t.Dict[str, t.Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result = {
            "code": self.code,
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp,
            "traceId": self.trace_id,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.metadata:
            result["metadata"] = self.metadata
        return result


class StatusCode:
    """业务状态码定义"""

    # 成功 (1xxxx)
    SUCCESS = 10000
    CREATED = 10001
    UPDATED = 10002
    DELETED = 10003

    # 客户端错误 (4xxxx)
    BAD_REQUEST = 40000
    VALIDATION_ERROR = 40001
    UNAUTHORIZED = 40100
    TOKEN_INVALID = 40102
    FORBIDDEN = 40300
    NOT_FOUND = 40400
    ENTITY_NOT_FOUND = 40401
    CONFLICT = 40900
    OPTIMISTIC_LOCK_ERROR = 40901
    DUPLICATE_ENTITY = 40902

    # 服务端错误 (5xxxx)
    SERVER_ERROR = 50000
    THIRD_PARTY_SERVICE_ERROR = 50005


# 错误类型 -> (业务状态码, HTTP状态码)
ERROR_TYPE_MAPPING = {
    ErrorType.VALIDATION: (StatusCode.VALIDATION_ERROR, http_status.HTTP_400_BAD_REQUEST),
    ErrorType.NOT_FOUND: (StatusCode.ENTITY_NOT_FOUND, http_status.HTTP_404_NOT_FOUND),
    ErrorType.CONFLICT: (StatusCode.CONFLICT, http_status.HTTP_409_CONFLICT),
    ErrorType.UNAUTHORIZED: (StatusCode.UNAUTHORIZED, http_status.HTTP_401_UNAUTHORIZED),
    ErrorType.FORBIDDEN: (StatusCode.FORBIDDEN, http_status.HTTP_403_FORBIDDEN),
    ErrorType.FAILURE: (StatusCode.SERVER_ERROR, http_status.HTTP_500_INTERNAL_SERVER_ERROR),
}


class ApiResponseBuilder:
    """API响应构建器"""

    @staticmethod
    def success(
        data: t.Any = None,
        message: str = "操作成功",
        code: int = StatusCode.SUCCESS,
        metadata: t.Dict[str, t.Any] = None
    ) -> Response:
        response = ApiResponse(code=code, success=True, message=message, data=data, metadata=metadata or {})
        return Response(response.to_dict(), status=http_status.HTTP_200_OK)

    @staticmethod
    def created(
        data: t.Any = None,
        message: str = "创建成功",
        code: int = StatusCode.CREATED,
        metadata: t.Dict[str, t.Any] = None
    ) -> Response:
        response = ApiResponse(code=code, success=True, message=message, data=data, metadata=metadata or {})
        return Response(response.to_dict(), status=http_status.HTTP_201_CREATED)

    @staticmethod
    def fail(
        message: str = "操作失败",
        code: int = StatusCode.SERVER_ERROR,
        data: t.Any = None,
        http_code: int = http_status.HTTP_400_BAD_REQUEST,
        metadata: t.Dict[str, t.Any] = None
    ) -> Response:
        """
        创建失败响应

        Args:
            message: 错误消息
            code: 业务状态码
            data: 错误详情数据
            http_code: HTTP状态码
            metadata: 元数据

        Returns:
            Response: DRF响应对象
        """
        response = ApiResponse(code=code, success=False, message=message, data=data, metadata=metadata or {})
        return Response(response.to_dict(), status=http_code)

    @staticmethod
    def from_error(error: Error) -> Response:
        """
        根据领域错误创建失败响应。
        错误类型决定业务状态码与HTTP状态码，错误编码放在data中供客户端识别。

        Args:
            error: 领域错误

        Returns:
            Response: DRF响应对象
        """
        code, http_code = ERROR_TYPE_MAPPING.get(
            error.type, (StatusCode.SERVER_ERROR, http_status.HTTP_500_INTERNAL_SERVER_ERROR)
        )
        return ApiResponseBuilder.fail(
            message=error.message,
            code=code,
            data=error.to_dict(),
            http_code=http_code,
        )

    @staticmethod
    def paginated(
        items: list,
        total: int,
        page: int,
        page_size: int,
        message: str = "查询成功",
        code: int = StatusCode.SUCCESS,
        metadata: t.Dict[str, t.Any] = None
    ) -> Response:
        """
        创建分页响应

        Args:
            items: 分页项列表
            total: 总项数
            page: 当前页码
            page_size: 每页大小
            message: 响应消息
            code: 业务状态码
            metadata: 元数据

        Returns:
            Response: DRF响应对象
        """
        total_pages = (total + page_size - 1) // page_size if page_size else 0
        pagination_data = {
            "items": items,
            "pagination": {
                "total": total,
                "page": page,
                "pageSize": page_size,
                "totalPages": total_pages,
                "hasPrevious": page > 1,
                "hasNext": page < total_pages,
            }
        }
        return ApiResponseBuilder.success(data=pagination_data, message=message, code=code, metadata=metadata)
