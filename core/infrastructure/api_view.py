"""
API视图基类。
提供统一的API视图类，用于规范API响应格式和处理通用逻辑。
"""
from rest_framework import status

from rest_framework.views import APIView

from core.application.pagination import DataTableResult, PaginatedResult, normalize_page
from core.domain.results import Result
from core.infrastructure.response import ApiResponseBuilder, StatusCode


class ApiBaseView(APIView):
    """API视图基类，提供统一的响应方法"""

    def success_response(self, data=None, message="操作成功", code=StatusCode.SUCCESS, metadata=None):
        return ApiResponseBuilder.success(data=data, message=message, code=code, metadata=metadata)

    def created_response(self, data=None, message="创建成功", code=StatusCode.CREATED, metadata=None):
        return ApiResponseBuilder.created(data=data, message=message, code=code, metadata=metadata)

    def failed_response(self, message="操作失败", code=StatusCode.BAD_REQUEST,
                        data=None, http_code=status.HTTP_400_BAD_REQUEST, metadata=None):
        return ApiResponseBuilder.fail(
            message=message, code=code, data=data, http_code=http_code, metadata=metadata
        )

    def paginated_response(self, items, total, page, page_size,
                           message="查询成功", code=StatusCode.SUCCESS, metadata=None):
        return ApiResponseBuilder.paginated(
            items=items, total=total, page=page, page_size=page_size,
            message=message, code=code, metadata=metadata
        )

    def result_response(self, result: Result, message="操作成功", created=False, code=None):
        """
        将应用服务返回的结果转换为响应。

        成功时对值调用to_dict()后放入data，分页和数据表结果按各自结构输出；
        失败时根据错误类型映射HTTP状态码。

        Args:
            result: 应用服务返回的结果
            message: 成功时的响应消息
            created: 成功时是否返回201
            code: 成功时的业务状态码

        Returns:
            Response: 统一格式的响应
        """
        if result.is_failure:
            return ApiResponseBuilder.from_error(result.error)

        value = result.value
        if isinstance(value, PaginatedResult):
            return self.paginated_response(
                items=[item.to_dict() if hasattr(item, "to_dict") else item for item in value.items],
                total=value.total, page=value.page, page_size=value.page_size, message=message
            )
        if isinstance(value, DataTableResult):
            return self.success_response(data=value.to_dict(), message=message)

        if hasattr(value, "to_dict"):
            data = value.to_dict()
        elif isinstance(value, (list, tuple)):
            data = [item.to_dict() if hasattr(item, "to_dict") else item for item in value]
        else:
            data = value

        if created:
            return self.created_response(data=data, message=message, code=code or StatusCode.CREATED)
        return self.success_response(data=data, message=message, code=code or StatusCode.SUCCESS)

    def validate(self, serializer_class, data):
        """
        校验请求数据，校验失败时抛出DRF的ValidationError，由统一异常处理器处理。

        Returns:
            校验后的数据
        """
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def get_page_params(self, request, default_page_size=20, max_page_size=100):
        """
        从查询参数中读取分页参数。

        Returns:
            (页码, 每页大小)元组
        """
        return normalize_page(
            request.query_params.get("page", 1),
            request.query_params.get("page_size", request.query_params.get("pageSize", default_page_size)),
            max_page_size,
        )

    def get_client_info(self, request):
        """
        获取客户端IP和User-Agent。

        Returns:
            (ip_address, user_agent)元组
        """
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
        ip_address = forwarded.split(",")[0].strip() if forwarded else request.META.get("REMOTE_ADDR")
        return ip_address, request.META.get("HTTP_USER_AGENT", "")
