"""
结果模式模块。
提供Result/Error值类型，用于在不抛出异常的情况下表达预期内的失败。
"""
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorType:
    """错误类型枚举"""
    VALIDATION = "Validation"      # 数据验证失败
    NOT_FOUND = "NotFound"         # 资源不存在
    CONFLICT = "Conflict"          # 资源冲突
    UNAUTHORIZED = "Unauthorized"  # 未认证
    FORBIDDEN = "Forbidden"        # 权限不足
    FAILURE = "Failure"            # 其他失败

    ALL = (VALIDATION, NOT_FOUND, CONFLICT, UNAUTHORIZED, FORBIDDEN, FAILURE)


class Error:
    """
    错误描述。
    由错误码、错误消息、错误类型和可选的元数据组成。
    """

    def __init__(
        self,
        code: str,
        message: str,
        type: str = ErrorType.FAILURE,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        初始化错误。

        Args:
            code: 错误码，如"Product.NotFound"
            message: 错误消息
            type: 错误类型，取值见ErrorType
            metadata: 附加信息，如字段级别的验证错误
        """
        if type not in ErrorType.ALL:
            raise ValueError(f"未知的错误类型: {type}")
        self.code = code
        self.message = message
        self.type = type
        self.metadata = metadata or {}

    @classmethod
    def validation(cls, code: str = "General.Validation", message: str = "数据验证失败",
                   metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.VALIDATION, metadata)

    @classmethod
    def not_found(cls, code: str = "General.NotFound", message: str = "资源不存在",
                  metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.NOT_FOUND, metadata)

    @classmethod
    def conflict(cls, code: str = "General.Conflict", message: str = "资源冲突",
                 metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.CONFLICT, metadata)

    @classmethod
    def unauthorized(cls, code: str = "General.Unauthorized", message: str = "请先登录",
                     metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.UNAUTHORIZED, metadata)

    @classmethod
    def forbidden(cls, code: str = "General.Forbidden", message: str = "权限不足",
                  metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.FORBIDDEN, metadata)

    @classmethod
    def failure(cls, code: str = "General.Failure", message: str = "操作失败",
                metadata: Optional[Dict[str, Any]] = None) -> 'Error':
        return cls(code, message, ErrorType.FAILURE, metadata)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code,
            "message": self.message,
            "type": self.type,
        }
        if self.metadata:
            result["metadata"] = self.metadata
        return result

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Error):
            return False
        return (self.code, self.message, self.type) == (other.code, other.message, other.type)

    def __hash__(self) -> int:
        return hash((self.code, self.message, self.type))

    def __repr__(self) -> str:
        return f"Error(code={self.code!r}, type={self.type!r}, message={self.message!r})"


class Result(Generic[T]):
    """
    操作结果。
    成功时携带值，失败时携带Error；两者互斥。
    """

    def __init__(self, is_success: bool, value: Optional[T] = None, error: Optional[Error] = None):
        if is_success and error is not None:
            raise ValueError("成功的结果不能包含错误")
        if not is_success and error is None:
            raise ValueError("失败的结果必须包含错误")
        self._is_success = is_success
        self._value = value
        self.error = error

    @classmethod
    def success(cls, value: Optional[T] = None) -> 'Result[T]':
        """创建成功结果"""
        return cls(True, value=value)

    @classmethod
    def failure(cls, error: Error) -> 'Result[T]':
        """创建失败结果"""
        return cls(False, error=error)

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def value(self) -> T:
        """
        获取成功结果的值。

        Raises:
            ValueError: 当结果为失败时访问值
        """
        if not self._is_success:
            raise ValueError(f"不能访问失败结果的值: {self.error.code}")
        return self._value

    def __repr__(self) -> str:
        if self._is_success:
            return f"Result.success({self._value!r})"
        return f"Result.failure({self.error!r})"
