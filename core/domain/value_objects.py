"""
值对象模块。
包含ValueObject基类和通用值对象实现：Money、Email、Slug、PostalAddress、PhoneNumber。
"""
from decimal import Decimal, InvalidOperation
import re
from typing import Any, Dict, Optional

from core.domain.exceptions import (
    BusinessRuleViolationException,
    DomainException,
    ValidationException,
)
from core.domain.results import Result


class ValueObject:
    """
    值对象基类。
    值对象是通过其属性值而非标识定义的不可变对象。
    相同属性值的值对象被视为相等。
    """

    @classmethod
    def create(cls, *args: Any, **kwargs: Any) -> Result:
        """
        创建值对象，并将验证失败转换为失败结果。

        Returns:
            成功时包含值对象的结果，验证失败时包含对应错误的结果
        """
        try:
            return Result.success(cls(*args, **kwargs))
        except DomainException as e:
            return Result.failure(e.to_error())

    def __eq__(self, other: Any) -> bool:
        """
        判断两个值对象是否相等，通过比较它们的属性值。

        Args:
            other: 另一个值对象

        Returns:
            如果两个值对象的属性值相等，则返回True；否则返回False
        """
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        """
        计算值对象的哈希值，基于其属性值。

        Returns:
            值对象属性值的哈希值
        """
        # 将__dict__转换为可哈希类型(frozenset)
        items = frozenset((k, hash(v)) for k, v in self.__dict__.items())
        return hash(items)


class Money(ValueObject):
    """
    金额值对象，表示带有货币单位的非负金额。
    """

    DEFAULT_CURRENCY = "USD"

    def __init__(self, amount: Any, currency: str = DEFAULT_CURRENCY):
        """
        初始化金额值对象。

        Args:
            amount: 金额数值，将被转换为Decimal
            currency: 三位货币代码，默认为美元(USD)

        Raises:
            ValidationException: 金额为负数、无法解析或货币代码无效时抛出
        """
        try:
            amount = Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationException("amount", f"无效的金额: {amount}")
        if amount.is_nan() or amount < 0:
            raise ValidationException("amount", "金额不能为负数")

        currency = (currency or "").strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationException("currency", "货币代码必须是三位字母")

        self.amount = amount
        self.currency = currency

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> 'Money':
        return cls(0, currency)

    @classmethod
    def from_dollars(cls, amount: Any) -> 'Money':
        return cls(amount, "USD")

    @classmethod
    def from_euros(cls, amount: Any) -> 'Money':
        return cls(amount, "EUR")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Money':
        return cls(data["amount"], data.get("currency", cls.DEFAULT_CURRENCY))

    def _ensure_same_currency(self, other: 'Money', operation: str) -> None:
        if self.currency != other.currency:
            raise BusinessRuleViolationException(
                "Money.CurrencyMismatch",
                f"不能{operation}不同货币单位的金额: {self.currency} != {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        """
        金额加法运算。

        Raises:
            BusinessRuleViolationException: 当两个金额的货币单位不同时抛出
        """
        self._ensure_same_currency(other, "相加")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """
        金额减法运算。

        Raises:
            BusinessRuleViolationException: 当两个金额的货币单位不同时抛出
            ValidationException: 当结果为负数时抛出
        """
        self._ensure_same_currency(other, "相减")
        if other.amount > self.amount:
            raise ValidationException("amount", "减法结果不能为负数")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, multiplier: Any) -> 'Money':
        """
        金额乘法运算。

        Raises:
            ValidationException: 当乘数为负数时抛出
        """
        multiplier = Decimal(str(multiplier))
        if multiplier < 0:
            raise ValidationException("multiplier", "乘数不能为负数")
        return Money(self.amount * multiplier, self.currency)

    def __lt__(self, other: 'Money') -> bool:
        self._ensure_same_currency(other, "比较")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._ensure_same_currency(other, "比较")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._ensure_same_currency(other, "比较")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._ensure_same_currency(other, "比较")
        return self.amount >= other.amount

    __hash__ = ValueObject.__hash__

    def is_zero(self) -> bool:
        return self.amount == 0

    def rounded(self) -> 'Money':
        """返回保留两位小数的金额"""
        return Money(self.amount.quantize(Decimal("0.01")), self.currency)

    def __str__(self) -> str:
        """
        返回金额的字符串表示。

        Returns:
            金额的字符串表示，例如"USD 100.00"
        """
        return f"{self.currency} {self.amount:.2f}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"

    def to_dict(self) -> Dict[str, Any]:
        """
        将金额转换为字典表示。

        Returns:
            包含金额和货币单位的字典
        """
        return {
            "amount": str(self.amount),
            "currency": self.currency
        }


class Email(ValueObject):
    """电子邮箱值对象，统一为小写形式"""

    MAX_LENGTH = 255
    PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    def __init__(self, value: str):
        value = (value or "").strip().lower()
        if not value:
            raise ValidationException("email", "邮箱不能为空")
        if len(value) > self.MAX_LENGTH:
            raise ValidationException("email", f"邮箱长度不能超过{self.MAX_LENGTH}个字符")
        if not self.PATTERN.match(value):
            raise ValidationException("email", "邮箱格式无效")
        self.value = value

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email({self.value!r})"


class Slug(ValueObject):
    """
    URL友好标识值对象。
    输入文本会被规范化：转为小写、空格替换为连字符、去除特殊字符、合并重复的连字符。
    """

    MAX_LENGTH = 255

    def __init__(self, value: str):
        normalized = self.normalize(value or "")
        if not normalized:
            raise ValidationException("slug", "Slug不能为空")
        if len(normalized) > self.MAX_LENGTH:
            raise ValidationException("slug", f"Slug长度不能超过{self.MAX_LENGTH}个字符")
        self.value = normalized

    @staticmethod
    def normalize(text: str) -> str:
        """
        规范化文本为slug形式。

        Args:
            text: 原始文本

        Returns:
            规范化后的slug字符串，可能为空
        """
        slug = text.strip().lower()
        slug = re.sub(r"\s+", "-", slug)
        slug = re.sub(r"[^a-z0-9-]", "", slug)
        slug = re.sub(r"-{2,}", "-", slug)
        return slug.strip("-")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Slug({self.value!r})"


class PhoneNumber(ValueObject):
    """电话号码值对象，去除分隔符后保存"""

    PATTERN = re.compile(r"^\+?\d{7,20}$")

    def __init__(self, value: str):
        normalized = re.sub(r"[\s\-().]", "", value or "")
        if not normalized:
            raise ValidationException("phone", "电话号码不能为空")
        if not self.PATTERN.match(normalized):
            raise ValidationException("phone", "电话号码格式无效")
        self.value = normalized

    def __str__(self) -> str:
        return self.value


class PostalAddress(ValueObject):
    """
    邮政地址值对象。
    除第二行地址外所有字段都是必填的。
    """

    def __init__(
        self,
        address_line1: str,
        city: str,
        state: str,
        country: str,
        postal_code: str,
        address_line2: Optional[str] = None
    ):
        """
        初始化邮政地址。

        Args:
            address_line1: 地址第一行
            city: 城市
            state: 州/省
            country: 国家
            postal_code: 邮政编码
            address_line2: 地址第二行，可选

        Raises:
            ValidationException: 必填字段为空时抛出
        """
        required = {
            "address_line1": address_line1,
            "city": city,
            "state": state,
            "country": country,
            "postal_code": postal_code,
        }
        for field_name, value in required.items():
            if not value or not str(value).strip():
                raise ValidationException(field_name, "不能为空")

        self.address_line1 = address_line1.strip()
        self.address_line2 = address_line2.strip() if address_line2 and address_line2.strip() else None
        self.city = city.strip()
        self.state = state.strip()
        self.country = country.strip()
        self.postal_code = str(postal_code).strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PostalAddress':
        return cls(
            address_line1=data.get("address_line1"),
            address_line2=data.get("address_line2"),
            city=data.get("city"),
            state=data.get("state"),
            country=data.get("country"),
            postal_code=data.get("postal_code"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postal_code": self.postal_code,
        }

    def __str__(self) -> str:
        lines = [self.address_line1]
        if self.address_line2:
            lines.append(self.address_line2)
        lines.append(f"{self.city}, {self.state} {self.postal_code}")
        lines.append(self.country)
        return "\n".join(lines)
