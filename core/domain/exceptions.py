"""
领域异常模块。
包含领域模型中使用的各种异常类。
每个异常都对应一个错误类型(ErrorType)，应用层据此将其转换为失败结果。
"""
from typing import Any, Optional

from core.domain.results import Error, ErrorType


class DomainException(Exception):
    """
    领域异常基类。
    所有领域模型中的异常都应继承自此类。
    """

    error_type = ErrorType.VALIDATION
    default_code = "Domain.Error"

    def __init__(self, message: str, code: Optional[str] = None):
        """
        初始化领域异常。

        Args:
            message: 异常消息
            code: 错误码，未提供时使用类的默认错误码
        """
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_error(self) -> Error:
        """
        转换为结果模式中的错误对象。

        Returns:
            与异常对应的Error
        """
        return Error(self.code, self.message, self.error_type)


class EntityNotFoundException(DomainException):
    """
    实体未找到异常。
    当请求的实体不存在时抛出。
    """

    error_type = ErrorType.NOT_FOUND

    def __init__(self, entity_name: str, entity_id: Any):
        """
        初始化实体未找到异常。

        Args:
            entity_name: 实体名称
            entity_id: 实体ID或其他查找键
        """
        message = f"无法找到{entity_name}: ID={entity_id}"
        super().__init__(message, code=f"{entity_name}.NotFound")
        self.entity_name = entity_name
        self.entity_id = entity_id


class BusinessRuleViolationException(DomainException):
    """
    业务规则违反异常。
    当违反业务规则时抛出。
    """

    def __init__(self, rule_name: str, message: str):
        """
        初始化业务规则违反异常。

        Args:
            rule_name: 规则名称，同时作为错误码
            message: 异常消息
        """
        full_message = f"违反业务规则 '{rule_name}': {message}"
        super().__init__(full_message, code=rule_name)
        self.rule_name = rule_name


class ConcurrencyException(DomainException):
    """
    并发异常。
    当发生并发冲突时抛出，例如在乐观锁情况下。
    """

    error_type = ErrorType.CONFLICT

    def __init__(self, entity_name: str, entity_id: Any):
        message = f"{entity_name}(ID={entity_id})已被另一个事务修改"
        super().__init__(message, code=f"{entity_name}.ConcurrencyConflict")
        self.entity_name = entity_name
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """
    实体重复异常。
    当唯一字段(如邮箱、SKU、Slug)已被占用时抛出。
    """

    error_type = ErrorType.CONFLICT

    def __init__(self, entity_name: str, field_name: str, value: Any):
        """
        初始化实体重复异常。

        Args:
            entity_name: 实体名称
            field_name: 重复的字段
            value: 重复的值
        """
        message = f"{entity_name}的{field_name}'{value}'已存在"
        super().__init__(message, code=f"{entity_name}.Duplicate")
        self.entity_name = entity_name
        self.field_name = field_name
        self.value = value


class ConflictException(DomainException):
    """
    资源冲突异常。
    当操作与资源的当前关系冲突时抛出，例如删除仍有子分类的分类。
    """

    error_type = ErrorType.CONFLICT

    def __init__(self, code: str, message: str):
        super().__init__(message, code=code)


class InsufficientStockException(DomainException):
    """
    库存不足异常。
    当商品变体库存不足以满足请求时抛出。
    """

    def __init__(self, variant_id: Any, requested: int, available: int):
        """
        初始化库存不足异常。

        Args:
            variant_id: 商品变体ID
            requested: 请求数量
            available: 可用数量
        """
        message = f"商品变体(ID={variant_id})库存不足，请求:{requested}，可用:{available}"
        super().__init__(message, code="ProductVariant.InsufficientStock")
        self.variant_id = variant_id
        self.requested = requested
        self.available = available


class ValidationException(DomainException):
    """
    数据验证异常。
    当数据验证失败时抛出。
    """

    def __init__(self, field_name: Optional[str] = None, message: str = "数据验证失败"):
        """
        初始化数据验证异常。

        Args:
            field_name: 字段名称
            message: 异常消息
        """
        if field_name:
            full_message = f"字段'{field_name}'验证失败: {message}"
            code = f"Validation.{field_name}"
        else:
            full_message = message
            code = "Validation.Failed"
        super().__init__(full_message, code=code)
        self.field_name = field_name


class AuthenticationException(DomainException):
    """
    认证异常。
    当凭据无效、令牌失效或账户被锁定时抛出。
    """

    error_type = ErrorType.UNAUTHORIZED

    def __init__(self, message: str = "身份验证失败", code: str = "Auth.Unauthorized"):
        super().__init__(message, code=code)


class AuthorizationException(DomainException):
    """
    授权异常。
    当用户没有执行操作的权限时抛出。
    """

    error_type = ErrorType.FORBIDDEN

    def __init__(self, user_id: Any, operation: str, resource: Optional[str] = None):
        """
        初始化授权异常。

        Args:
            user_id: 用户ID
            operation: 操作名称
            resource: 资源名称
        """
        if resource:
            message = f"用户(ID={user_id})没有权限执行'{operation}'操作，资源: {resource}"
        else:
            message = f"用户(ID={user_id})没有权限执行'{operation}'操作"
        super().__init__(message, code="Auth.Forbidden")
        self.user_id = user_id
        self.operation = operation
        self.resource = resource


class ExternalServiceException(DomainException):
    """
    外部服务异常。
    当支付网关、对象存储等第三方服务调用失败时抛出。
    """

    error_type = ErrorType.FAILURE

    def __init__(self, service_name: str, message: str, code: Optional[str] = None):
        super().__init__(f"{service_name}调用失败: {message}", code=code or f"{service_name}.Failure")
        self.service_name = service_name
