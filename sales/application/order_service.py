"""
订单应用服务。
处理从购物车下单、订单状态流转和订单查询。
"""
from decimal import Decimal
from typing import Dict, List, Optional

from loguru import logger

from catalog.domain import ProductRepository
from core.application.pagination import DataTableRequest, DataTableResult, PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import (
    AuthorizationException,
    BusinessRuleViolationException,
    EntityNotFoundException,
    Money,
    ValidationException,
)
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from sales.application.cart_service import find_variant
from sales.application.commands import (
    CancelOrderCommand,
    CreateOrderFromCartCommand,
    MarkOrderDeliveredCommand,
    MarkOrderShippedCommand,
    UpdateOrderStatusCommand,
)
from sales.application.dtos import OrderDTO
from sales.domain import Cart, CartRepository, Order, OrderRepository, OrderStatus
from shipping.domain import Address, AddressRepository

DEFAULT_SHIPPING_COSTS = {
    "standard": "5.00",
    "express": "15.00",
    "overnight": "25.00",
}


class OrderApplicationService(ApplicationService):
    """
    订单应用服务。
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        cart_repository: CartRepository,
        product_repository: ProductRepository,
        address_repository: AddressRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None,
        options: Optional[Dict] = None
    ):
        """
        初始化订单应用服务。

        Args:
            order_repository: 订单仓储
            cart_repository: 购物车仓储
            product_repository: 商品仓储
            address_repository: 地址仓储
            transaction_manager: 事务管理器
            cache_service: 缓存服务
            options: 销售配置，对应SALES_SETTINGS
        """
        super().__init__(transaction_manager, cache_service)
        self.order_repository = order_repository
        self.cart_repository = cart_repository
        self.product_repository = product_repository
        self.address_repository = address_repository
        options = options or {}
        self.tax_rate = Decimal(str(options.get("TAX_RATE", "0.08")))
        self.shipping_costs = {
            method.lower(): Decimal(str(cost))
            for method, cost in (options.get("SHIPPING_COSTS") or DEFAULT_SHIPPING_COSTS).items()
        }
        self.currency = options.get("CURRENCY", Money.DEFAULT_CURRENCY)
        self.cache_timeout = options.get("CACHE_TIMEOUT", 600)

    def _get_order(self, order_id) -> Order:
        order = self.order_repository.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundException("Order", order_id)
        return order

    def _get_owned_address(self, address_id, user_id) -> Address:
        address = self.address_repository.get_by_id(address_id)
        if address is None or str(address.user_id) != str(user_id):
            raise EntityNotFoundException("Address", address_id)
        return address

    def _get_user_cart(self, cart_id, user_id) -> Cart:
        if cart_id:
            cart = self.cart_repository.get_by_id(cart_id)
            if cart is None or not cart.belongs_to(user_id):
                raise EntityNotFoundException("Cart", cart_id)
        else:
            cart = self.cart_repository.get_by_user(user_id)
            if cart is None:
                raise EntityNotFoundException("Cart", f"user:{user_id}")
        if cart.is_empty():
            raise BusinessRuleViolationException("Cart.Empty", "购物车为空，不能下单")
        return cart

    def shipping_cost_for(self, shipping_method: str) -> Money:
        """
        Raises:
            ValidationException: 配送方式无效
        """
        method = (shipping_method or "").lower()
        if method not in self.shipping_costs:
            raise ValidationException(
                "shipping_method", f"无效的配送方式: {shipping_method}，可选: {', '.join(self.shipping_costs)}"
            )
        return Money(self.shipping_costs[method], self.currency)

    # ==================== 命令处理方法 ====================

    @service_operation("创建订单")
    def create_order_from_cart(self, command: CreateOrderFromCartCommand) -> OrderDTO:
        """
        从购物车创建订单，下单后清空购物车。

        商品单价取变体价格，变体未设置价格时取商品基础价格。税额为小计乘以税率，
        运费按配送方式确定。下单只校验库存，不扣减库存。

        Args:
            command: 下单命令

        Returns:
            订单DTO

        Raises:
            ValidationException: 配送方式无效
            EntityNotFoundException: 购物车、地址或商品不存在
            BusinessRuleViolationException: 购物车为空或商品已下架
            InsufficientStockException: 库存不足
        """
        shipping_cost = self.shipping_cost_for(command.shipping_method)
        with self.transaction_manager.start():
            cart = self._get_user_cart(command.cart_id, command.user_id)
            shipping_address = self._get_owned_address(command.shipping_address_id, command.user_id)
            billing_address = shipping_address
            if command.billing_address_id and str(command.billing_address_id) != str(shipping_address.id):
                billing_address = self._get_owned_address(command.billing_address_id, command.user_id)

            lines = []
            subtotal = Money.zero(self.currency)
            for item in cart.items:
                product = self.product_repository.get_by_id(item.product_id)
                if product is None:
                    raise EntityNotFoundException("Product", item.product_id)
                variant = find_variant(product, item.variant_id)
                if item.variant_id and variant is None:
                    raise EntityNotFoundException("ProductVariant", item.variant_id)
                if not product.is_active or (variant is not None and not variant.is_active):
                    raise BusinessRuleViolationException(
                        "Order.ProductUnavailable", f"商品'{product.name}'已下架"
                    )
                unit_price = variant.effective_price(product.base_price) if variant else product.base_price
                lines.append((product, item.quantity, unit_price, variant))
                subtotal = subtotal + unit_price * item.quantity

            tax = (subtotal * self.tax_rate).rounded()
            order = Order.create(
                user_id=command.user_id,
                shipping_address_id=shipping_address.id,
                shipping_address=shipping_address.postal_address,
                billing_address_id=billing_address.id,
                billing_address=billing_address.postal_address,
                tax=tax,
                shipping_cost=shipping_cost,
                shipping_method=command.shipping_method.lower(),
            )
            for product, quantity, unit_price, variant in lines:
                order.add_item(product, quantity, unit_price, variant)
            self.order_repository.save(order)

            cart.clear()
            self.cart_repository.save(cart)
            logger.info(f"订单已创建: {order.id} 用户={command.user_id} 总额={order.total}")
            return OrderDTO.from_domain(order)

    @service_operation("更新订单状态")
    def update_status(self, command: UpdateOrderStatusCommand) -> OrderDTO:
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            order.update_status(command.status)
            self.order_repository.save(order)
            return OrderDTO.from_domain(order)

    @service_operation("订单发货")
    def mark_as_shipped(self, command: MarkOrderShippedCommand) -> OrderDTO:
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            order.mark_as_shipped(command.tracking_number)
            self.order_repository.save(order)
            logger.info(f"订单已发货: {order.id} 运单号={command.tracking_number}")
            return OrderDTO.from_domain(order)

    @service_operation("订单送达")
    def mark_as_delivered(self, command: MarkOrderDeliveredCommand) -> OrderDTO:
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            order.mark_as_delivered()
            self.order_repository.save(order)
            return OrderDTO.from_domain(order)

    @service_operation("取消订单")
    def cancel_order(self, command: CancelOrderCommand) -> OrderDTO:
        """
        取消订单。顾客只能取消自己的待处理或处理中订单，管理员和经理不受此限制。

        Raises:
            EntityNotFoundException: 订单不存在
            AuthorizationException: 订单不属于该用户
            BusinessRuleViolationException: 订单状态不允许取消
        """
        with self.transaction_manager.start():
            order = self._get_order(command.order_id)
            if not command.is_staff:
                if not order.belongs_to(command.user_id):
                    raise AuthorizationException(command.user_id, "取消订单", f"Order:{order.id}")
                if order.status not in OrderStatus.CUSTOMER_CANCELLABLE and order.status != OrderStatus.CANCELLED:
                    raise BusinessRuleViolationException(
                        "Order.CannotCancel", f"{order.status}状态的订单不能取消"
                    )
            order.cancel(command.reason)
            self.order_repository.save(order)
            logger.info(f"订单已取消: {order.id} 原因={command.reason}")
            return OrderDTO.from_domain(order)

    # ==================== 查询处理方法 ====================

    @service_operation("获取订单")
    def get_order(self, order_id, user_id, is_staff: bool = False) -> OrderDTO:
        """
        获取订单详情，只有下单用户、管理员和经理可以查看。

        Raises:
            EntityNotFoundException: 订单不存在
            AuthorizationException: 无权查看
        """
        dto = self._cached(
            f"order:{order_id}",
            lambda: self._load_dto(self.order_repository.get_by_id(order_id)),
            self.cache_timeout,
        )
        if dto is None:
            raise EntityNotFoundException("Order", order_id)
        if not is_staff and dto.user_id != str(user_id):
            raise AuthorizationException(user_id, "查看订单", f"Order:{order_id}")
        return dto

    @staticmethod
    def _load_dto(order: Optional[Order]) -> Optional[OrderDTO]:
        return OrderDTO.from_domain(order) if order else None

    @service_operation("获取用户订单")
    def get_user_orders(self, user_id, page: int = 1, page_size: int = 20) -> PaginatedResult:
        def load():
            orders, total = self.order_repository.get_by_user(user_id, page, page_size)
            return PaginatedResult([OrderDTO.from_domain(o) for o in orders], total, page, page_size)

        return self._cached(f"orders:user:{user_id}:{page}:{page_size}", load, self.cache_timeout)

    @service_operation("获取最近订单")
    def get_recent_orders(self, count: int = 10) -> List[OrderDTO]:
        return self._cached(
            f"orders:recent:{count}",
            lambda: [OrderDTO.from_domain(o) for o in self.order_repository.get_recent(count)],
            self.cache_timeout,
        )

    @service_operation("订单数据表查询")
    def get_datatable(self, request: DataTableRequest) -> DataTableResult:
        orders, total, filtered = self.order_repository.datatable(request)
        return DataTableResult(request.draw, total, filtered, [OrderDTO.from_domain(o).to_dict() for o in orders])
