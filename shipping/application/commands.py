"""
配送应用服务层的命令对象。
"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CreateAddressCommand:
    """创建地址命令"""
    user_id: Any
    address_line1: str
    city: str
    state: str
    country: str
    postal_code: str
    address_line2: Optional[str] = None
    phone: Optional[str] = None
    address_type: str = "Shipping"
    is_default: bool = False


@dataclass
class UpdateAddressCommand:
    """更新地址命令，address_type为空时不修改类型"""
    id: Any
    user_id: Any
    address_line1: str
    city: str
    state: str
    country: str
    postal_code: str
    address_line2: Optional[str] = None
    phone: Optional[str] = None
    address_type: Optional[str] = None


@dataclass
class SetDefaultAddressCommand:
    id: Any
    user_id: Any


@dataclass
class DeleteAddressCommand:
    id: Any
    user_id: Any
