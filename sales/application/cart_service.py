"""
购物车应用服务。
"""
from typing import Dict, Optional

from loguru import logger

from catalog.domain import Product, ProductRepository, ProductVariant
from core.application.services import ApplicationService, service_operation
from core.domain import EntityNotFoundException, ValidationException
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from sales.application.commands import (
    AddItemToCartCommand,
    AssignCartCommand,
    ClearCartCommand,
    CreateCartCommand,
    RemoveCartItemCommand,
    UpdateCartItemCommand,
)
from sales.application.dtos import CartDTO, CartItemDTO
from sales.domain import Cart, CartRepository

CACHE_TIMEOUT = 300


def find_variant(product: Product, variant_id) -> Optional[ProductVariant]:
    if variant_id is None:
        return None
    return next((v for v in product.variants if str(v.id) == str(variant_id)), None)


class CartApplicationService(ApplicationService):
    """
    购物车应用服务。
    匿名购物车通过cart_id访问；已分配用户的购物车只有该用户可以访问。
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        product_repository: ProductRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None,
        currency: str = "USD"
    ):
        super().__init__(transaction_manager, cache_service)
        self.cart_repository = cart_repository
        self.product_repository = product_repository
        self.currency = currency

    def _find_cart(self, cart_id, user_id) -> Optional[Cart]:
        """
        按cart_id或用户查找购物车。

        Raises:
            EntityNotFoundException: cart_id对应的购物车不存在或属于其他用户
        """
        if cart_id:
            cart = self.cart_repository.get_by_id(cart_id)
            if cart is None or (cart.user_id is not None and not cart.belongs_to(user_id)):
                raise EntityNotFoundException("Cart", cart_id)
            return cart
        if user_id:
            return self.cart_repository.get_by_user(user_id)
        return None

    def _get_cart(self, cart_id, user_id) -> Cart:
        cart = self._find_cart(cart_id, user_id)
        if cart is None:
            raise EntityNotFoundException("Cart", cart_id or f"user:{user_id}")
        return cart

    def _get_product(self, product_id) -> Product:
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundException("Product", product_id)
        return product

    def _to_dto(self, cart: Cart) -> CartDTO:
        products: Dict[str, Optional[Product]] = {}
        items = []
        for item in cart.items:
            key = str(item.product_id)
            if key not in products:
                products[key] = self.product_repository.get_by_id(item.product_id)
            product = products[key]
            variant = find_variant(product, item.variant_id) if product else None
            items.append(CartItemDTO(item, product, variant))
        return CartDTO(cart, items, self.currency)

    # ==================== 命令处理方法 ====================

    @service_operation("创建购物车")
    def create_cart(self, command: CreateCartCommand) -> CartDTO:
        with self.transaction_manager.start():
            cart = Cart.create(command.user_id, command.metadata)
            self.cart_repository.save(cart)
            logger.info(f"购物车已创建: {cart.id} 用户={command.user_id}")
            return self._to_dto(cart)

    @service_operation("添加购物车商品")
    def add_item(self, command: AddItemToCartCommand) -> CartDTO:
        """
        添加商品到购物车。没有指定购物车时使用用户的购物车，不存在则创建。

        Args:
            command: 添加商品命令

        Returns:
            更新后的购物车DTO

        Raises:
            EntityNotFoundException: 购物车、商品或变体不存在
            ValidationException: 数量无效
            BusinessRuleViolationException: 商品或变体已下架
        """
        with self.transaction_manager.start():
            cart = self._find_cart(command.cart_id, command.user_id)
            if cart is None:
                cart = Cart.create(command.user_id)
            product = self._get_product(command.product_id)
            variant = product.get_variant(command.variant_id) if command.variant_id else None
            cart.add_item(product, command.quantity, variant)
            self.cart_repository.save(cart)
            return self._to_dto(cart)

    @service_operation("修改购物车商品数量")
    def update_item_quantity(self, command: UpdateCartItemCommand) -> CartDTO:
        with self.transaction_manager.start():
            cart = self._get_cart(command.cart_id, command.user_id)
            cart.update_item_quantity(command.item_id, command.quantity)
            self.cart_repository.save(cart)
            return self._to_dto(cart)

    @service_operation("移除购物车商品")
    def remove_item(self, command: RemoveCartItemCommand) -> CartDTO:
        with self.transaction_manager.start():
            cart = self._get_cart(command.cart_id, command.user_id)
            cart.remove_item(command.item_id)
            self.cart_repository.save(cart)
            return self._to_dto(cart)

    @service_operation("清空购物车")
    def clear_cart(self, command: ClearCartCommand) -> CartDTO:
        with self.transaction_manager.start():
            cart = self._get_cart(command.cart_id, command.user_id)
            cart.clear()
            self.cart_repository.save(cart)
            return self._to_dto(cart)

    @service_operation("分配购物车")
    def assign_cart(self, command: AssignCartCommand) -> CartDTO:
        """
        将匿名购物车分配给登录用户。

        Raises:
            EntityNotFoundException: 购物车不存在
            BusinessRuleViolationException: 购物车已属于其他用户
        """
        if not command.user_id:
            raise ValidationException("user_id", "用户不能为空")
        with self.transaction_manager.start():
            cart = self.cart_repository.get_by_id(command.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", command.cart_id)
            cart.assign_to_user(command.user_id)
            if cart.domain_events:
                self.cart_repository.save(cart)
            return self._to_dto(cart)

    # ==================== 查询处理方法 ====================

    @service_operation("获取购物车")
    def get_cart(self, cart_id=None, user_id=None) -> Optional[CartDTO]:
        """
        获取购物车。只提供user_id时返回用户最近的购物车，没有时返回None。
        """
        if cart_id:
            dto = self._cached(
                f"cart:{cart_id}",
                lambda: self._load_dto(self.cart_repository.get_by_id(cart_id)),
                CACHE_TIMEOUT,
            )
            if dto is None or (dto.user_id is not None and dto.user_id != str(user_id)):
                raise EntityNotFoundException("Cart", cart_id)
            return dto
        cart = self._find_cart(None, user_id)
        return self._to_dto(cart) if cart else None

    def _load_dto(self, cart: Optional[Cart]) -> Optional[CartDTO]:
        return self._to_dto(cart) if cart else None
