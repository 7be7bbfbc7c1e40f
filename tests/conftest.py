"""
测试公共夹具。
用户、商品、地址和订单都通过应用服务创建，与生产代码走同一条路径。
"""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from catalog.application import AddProductVariantCommand, CreateProductCommand
from catalog.infrastructure.factory import CatalogInfrastructureFactory
from core.infrastructure.cache import create_cache_service
from identity.domain import FullName, User, UserRole
from identity.infrastructure.repositories import DjangoUserRepository
from identity.infrastructure.security import PasswordService, TokenService
from sales.application import AddItemToCartCommand, CreateOrderFromCartCommand
from sales.infrastructure.factory import SalesInfrastructureFactory
from shipping.application import CreateAddressCommand
from shipping.infrastructure.factory import ShippingInfrastructureFactory

DEFAULT_PASSWORD = "Passw0rd!"


@pytest.fixture(autouse=True)
def clear_cache():
    create_cache_service().clear()
    yield
    create_cache_service().clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    """创建并保存用户，返回领域对象"""
    counter = {"n": 0}

    def _make(email=None, role=UserRole.CUSTOMER, password=DEFAULT_PASSWORD, first_name="Test", last_name="User"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        user = User.create(email, PasswordService().hash_password(password), FullName(first_name, last_name), role=role)
        DjangoUserRepository().save(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user(email="customer@example.com")


@pytest.fixture
def other_customer(make_user):
    return make_user(email="other@example.com")


@pytest.fixture
def admin_user(make_user):
    return make_user(email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def manager_user(make_user):
    return make_user(email="manager@example.com", role=UserRole.MANAGER)


@pytest.fixture
def auth_client():
    """返回携带指定用户访问令牌的客户端"""

    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {TokenService().generate_access_token(user)}")
        return client

    return _client


@pytest.fixture
def product_service(db):
    return CatalogInfrastructureFactory().create_product_service()


@pytest.fixture
def make_product(product_service):
    """创建商品，可选带一个变体，返回(商品DTO, 变体DTO或None)"""

    def _make(slug="classic-tee", base_price="20.00", variant_price="25.00", stock=10, with_variant=True):
        product = product_service.create_product(CreateProductCommand(
            name=slug.replace("-", " ").title(),
            slug=slug,
            base_price=Decimal(base_price),
            sku=slug.upper(),
        )).value
        variant = None
        if with_variant:
            variant = product_service.add_variant(AddProductVariantCommand(
                product_id=product.id,
                sku=f"{slug.upper()}-M",
                price=Decimal(variant_price) if variant_price is not None else None,
                stock_quantity=stock,
            )).value
        return product, variant

    return _make


@pytest.fixture
def product_with_variant(make_product):
    return make_product()


@pytest.fixture
def make_address(db):
    service = ShippingInfrastructureFactory().create_address_service()

    def _make(user, address_type="Shipping", is_default=False, city="Springfield"):
        return service.create_address(CreateAddressCommand(
            user_id=user.id,
            address_line1="742 Evergreen Terrace",
            city=city,
            state="IL",
            country="US",
            postal_code="62704",
            address_type=address_type,
            is_default=is_default,
        )).value

    return _make


@pytest.fixture
def place_order(make_address):
    """把商品加入用户购物车并下单，返回订单DTO"""

    def _place(user, product, variant=None, quantity=2, shipping_method="standard"):
        factory = SalesInfrastructureFactory()
        factory.create_cart_service().add_item(AddItemToCartCommand(
            product_id=product.id,
            variant_id=variant.id if variant else None,
            quantity=quantity,
            user_id=user.id,
        ))
        address = make_address(user)
        result = factory.create_order_service().create_order_from_cart(CreateOrderFromCartCommand(
            user_id=user.id,
            shipping_address_id=address.id,
            shipping_method=shipping_method,
        ))
        assert result.is_success, result.error
        return result.value

    return _place
