"""
统一异常处理器。
将视图中抛出的领域异常、Django异常和DRF异常转换为统一的API响应格式。
"""
import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    PermissionDenied as DRFPermissionDenied,
    ValidationError as DRFValidationError,
)

from core.domain.exceptions import ConcurrencyException, DomainException
from core.infrastructure.response import ApiResponseBuilder, StatusCode

logger = logging.getLogger(__name__)


def unified_exception_handler(exc, context):
    """
    统一异常处理器，将各种异常转换为统一的API响应格式。

    Args:
        exc: 异常对象
        context: 异常上下文

    Returns:
        Response: 统一格式的API响应
    """
    request = context.get('request')
    where = f"{request.method} {request.path}" if request is not None else "-"

    if isinstance(exc, ConcurrencyException):
        logger.warning(f"并发冲突: {where}: {exc}")
        return ApiResponseBuilder.fail(
            message=exc.message,
            code=StatusCode.OPTIMISTIC_LOCK_ERROR,
            data=exc.to_error().to_dict(),
            http_code=status.HTTP_409_CONFLICT
        )

    if isinstance(exc, DomainException):
        logger.warning(f"领域异常: {where}: [{exc.code}] {exc.message}")
        return ApiResponseBuilder.from_error(exc.to_error())

    if isinstance(exc, Http404):
        return ApiResponseBuilder.fail(
            message="请求的资源不存在", code=StatusCode.NOT_FOUND, http_code=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, ValidationError):
        return ApiResponseBuilder.fail(
            message="数据验证失败",
            code=StatusCode.VALIDATION_ERROR,
            data=exc.messages,
            http_code=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, (PermissionDenied, DRFPermissionDenied)):
        return ApiResponseBuilder.fail(
            message="权限不足", code=StatusCode.FORBIDDEN, http_code=status.HTTP_403_FORBIDDEN
        )

    if isinstance(exc, NotAuthenticated):
        return ApiResponseBuilder.fail(
            message="请先登录", code=StatusCode.UNAUTHORIZED, http_code=status.HTTP_401_UNAUTHORIZED
        )

    if isinstance(exc, AuthenticationFailed):
        return ApiResponseBuilder.fail(
            message=str(exc.detail),
            code=StatusCode.TOKEN_INVALID,
            http_code=status.HTTP_401_UNAUTHORIZED
        )

    if isinstance(exc, NotFound):
        return ApiResponseBuilder.fail(
            message="请求的资源不存在", code=StatusCode.NOT_FOUND, http_code=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, DRFValidationError):
        return ApiResponseBuilder.fail(
            message="数据验证失败",
            code=StatusCode.VALIDATION_ERROR,
            data=exc.detail,
            http_code=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, APIException):
        return ApiResponseBuilder.fail(
            message=str(exc.detail), code=StatusCode.BAD_REQUEST, http_code=exc.status_code
        )

    logger.exception(f"未处理的异常: {where}: {exc.__class__.__name__}: {exc}")
    return ApiResponseBuilder.fail(
        message="服务器内部错误",
        code=StatusCode.SERVER_ERROR,
        http_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
