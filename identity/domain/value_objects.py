"""
身份领域值对象。
"""
from typing import Any, Dict, Optional

from core.domain import ValidationException, ValueObject

NAME_MAX_LENGTH = 100


def _clean_name(field_name: str, value: Optional[str], required: bool = True) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        if required:
            raise ValidationException(field_name, "不能为空")
        return None
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationException(field_name, f"不能超过{NAME_MAX_LENGTH}个字符")
    return value


class FullName(ValueObject):
    """姓名值对象，名和姓必填，中间名可选"""

    def __init__(self, first_name: str, last_name: str, middle_name: Optional[str] = None):
        self.first_name = _clean_name("first_name", first_name)
        self.last_name = _clean_name("last_name", last_name)
        self.middle_name = _clean_name("middle_name", middle_name, required=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
        }

    def __str__(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)
