"""
销售应用服务层的命令对象。
购物车命令的cart_id和user_id至少提供一个，只有user_id时操作用户最近的购物车。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class CreateCartCommand:
    user_id: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AddItemToCartCommand:
    product_id: Any
    quantity: int = 1
    variant_id: Any = None
    cart_id: Any = None
    user_id: Any = None


@dataclass
class UpdateCartItemCommand:
    """quantity小于等于0时移除商品项"""
    item_id: Any
    quantity: int
    cart_id: Any = None
    user_id: Any = None


@dataclass
class RemoveCartItemCommand:
    item_id: Any
    cart_id: Any = None
    user_id: Any = None


@dataclass
class ClearCartCommand:
    cart_id: Any = None
    user_id: Any = None


@dataclass
class AssignCartCommand:
    cart_id: Any
    user_id: Any


@dataclass
class CreateOrderFromCartCommand:
    """从购物车下单，账单地址缺省时使用收货地址"""
    user_id: Any
    shipping_address_id: Any
    billing_address_id: Any = None
    shipping_method: str = "standard"
    cart_id: Any = None


@dataclass
class UpdateOrderStatusCommand:
    order_id: Any
    status: str


@dataclass
class MarkOrderShippedCommand:
    order_id: Any
    tracking_number: Optional[str] = None


@dataclass
class MarkOrderDeliveredCommand:
    order_id: Any


@dataclass
class CancelOrderCommand:
    order_id: Any
    user_id: Any
    reason: Optional[str] = None
    is_staff: bool = False
