"""
销售测试：购物车合并与分配、下单金额计算、订单状态流转和取消规则。
"""
from decimal import Decimal

import pytest
from django.core import mail

from catalog.application import ChangeProductStatusCommand
from sales.application import (
    AddItemToCartCommand,
    AssignCartCommand,
    CancelOrderCommand,
    CreateCartCommand,
    CreateOrderFromCartCommand,
    MarkOrderDeliveredCommand,
    MarkOrderShippedCommand,
    UpdateCartItemCommand,
    UpdateOrderStatusCommand,
)
from sales.infrastructure.factory import SalesInfrastructureFactory
from sales.infrastructure.repositories import DjangoOrderRepository


@pytest.fixture
def cart_service(db):
    return SalesInfrastructureFactory().create_cart_service()


@pytest.fixture
def order_service(db):
    return SalesInfrastructureFactory().create_order_service()


def mark_paid(order_id):
    repository = DjangoOrderRepository()
    order = repository.get_by_id(order_id)
    order.mark_as_paid()
    repository.save(order)


@pytest.mark.django_db
class TestCartService:

    def test_same_product_and_variant_are_merged(self, cart_service, customer, product_with_variant):
        product, variant = product_with_variant
        command = AddItemToCartCommand(product_id=product.id, variant_id=variant.id, quantity=1, user_id=customer.id)

        cart_service.add_item(command)
        cart = cart_service.add_item(command).value

        assert len(cart.items) == 1
        assert cart.total_quantity == 2
        assert cart.items[0].unit_price.amount == Decimal("25.00")
        assert cart.subtotal.amount == Decimal("50.00")

    def test_product_without_variant_is_a_separate_line(self, cart_service, customer, product_with_variant):
        product, variant = product_with_variant
        cart_service.add_item(AddItemToCartCommand(product_id=product.id, variant_id=variant.id, user_id=customer.id))
        cart = cart_service.add_item(AddItemToCartCommand(product_id=product.id, user_id=customer.id)).value

        assert len(cart.items) == 2
        assert cart.subtotal.amount == Decimal("45.00")

    def test_zero_quantity_removes_item(self, cart_service, customer, product_with_variant):
        product, variant = product_with_variant
        cart = cart_service.add_item(AddItemToCartCommand(
            product_id=product.id, variant_id=variant.id, quantity=3, user_id=customer.id
        )).value

        updated = cart_service.update_item_quantity(UpdateCartItemCommand(
            item_id=cart.items[0].id, quantity=0, cart_id=cart.id, user_id=customer.id
        )).value
        assert updated.items == []

    def test_inactive_product_cannot_be_added(self, cart_service, product_service, customer, product_with_variant):
        product, _ = product_with_variant
        product_service.change_status(ChangeProductStatusCommand(id=product.id, is_active=False))

        result = cart_service.add_item(AddItemToCartCommand(product_id=product.id, user_id=customer.id))
        assert result.error.code == "Cart.ProductInactive"

    def test_anonymous_cart_is_assigned_on_login(self, cart_service, customer, other_customer, product_with_variant):
        product, _ = product_with_variant
        anonymous = cart_service.add_item(AddItemToCartCommand(product_id=product.id)).value
        assert anonymous.user_id is None
        assert cart_service.get_cart(cart_id=anonymous.id).value.total_quantity == 1

        assigned = cart_service.assign_cart(AssignCartCommand(cart_id=anonymous.id, user_id=customer.id)).value
        assert assigned.user_id == str(customer.id)
        assert cart_service.get_cart(user_id=customer.id).value.id == anonymous.id

        taken = cart_service.assign_cart(AssignCartCommand(cart_id=anonymous.id, user_id=other_customer.id))
        assert taken.error.code == "Cart.AlreadyAssigned"
        assert cart_service.get_cart(cart_id=anonymous.id, user_id=other_customer.id).error.code == "Cart.NotFound"

    def test_user_without_cart(self, cart_service, customer):
        assert cart_service.get_cart(user_id=customer.id).value is None

    def test_create_cart_with_metadata(self, cart_service, customer):
        cart = cart_service.create_cart(CreateCartCommand(user_id=customer.id, metadata={"source": "mobile"})).value
        assert cart.to_dict()["metadata"] == {"source": "mobile"}
        assert cart.to_dict()["total_items"] == 0


@pytest.mark.django_db
class TestOrderCreation:

    def test_totals(self, place_order, cart_service, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant, quantity=2)

        assert order.subtotal.amount == Decimal("50.00")
        assert order.tax.amount == Decimal("4.00")
        assert order.shipping_cost.amount == Decimal("5.00")
        assert order.total.amount == Decimal("59.00")
        assert (order.status, order.payment_status) == ("Pending", "Pending")
        assert cart_service.get_cart(user_id=customer.id).value.items == []

    def test_express_shipping(self, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant, quantity=1, shipping_method="Express")

        assert order.shipping_method == "express"
        assert order.total.amount == Decimal("42.00")

    def test_unknown_shipping_method(self, order_service, make_address, customer):
        address = make_address(customer)
        result = order_service.create_order_from_cart(CreateOrderFromCartCommand(
            user_id=customer.id, shipping_address_id=address.id, shipping_method="teleport"
        ))
        assert result.error.code == "Validation.shipping_method"

    def test_empty_cart(self, order_service, cart_service, make_address, customer):
        cart_service.create_cart(CreateCartCommand(user_id=customer.id))
        address = make_address(customer)
        result = order_service.create_order_from_cart(CreateOrderFromCartCommand(
            user_id=customer.id, shipping_address_id=address.id
        ))
        assert result.error.code == "Cart.Empty"

    def test_deactivated_product_blocks_order(self, order_service, cart_service, product_service, make_address,
                                              customer, product_with_variant):
        product, variant = product_with_variant
        cart_service.add_item(AddItemToCartCommand(product_id=product.id, variant_id=variant.id, user_id=customer.id))
        product_service.change_status(ChangeProductStatusCommand(id=product.id, is_active=False))
        address = make_address(customer)

        result = order_service.create_order_from_cart(CreateOrderFromCartCommand(
            user_id=customer.id, shipping_address_id=address.id
        ))
        assert result.error.code == "Order.ProductUnavailable"

    def test_insufficient_stock(self, order_service, cart_service, make_address, customer, make_product):
        product, variant = make_product(slug="rare-tee", stock=1)
        cart_service.add_item(AddItemToCartCommand(
            product_id=product.id, variant_id=variant.id, quantity=3, user_id=customer.id
        ))
        address = make_address(customer)

        result = order_service.create_order_from_cart(CreateOrderFromCartCommand(
            user_id=customer.id, shipping_address_id=address.id
        ))
        assert result.error.code == "ProductVariant.InsufficientStock"

    def test_address_of_other_user(self, order_service, cart_service, make_address, customer, other_customer,
                                   product_with_variant):
        product, _ = product_with_variant
        cart_service.add_item(AddItemToCartCommand(product_id=product.id, user_id=customer.id))
        foreign = make_address(other_customer)

        result = order_service.create_order_from_cart(CreateOrderFromCartCommand(
            user_id=customer.id, shipping_address_id=foreign.id
        ))
        assert result.error.code == "Address.NotFound"


@pytest.mark.django_db
class TestOrderLifecycle:

    def test_shipping_requires_payment(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)

        result = order_service.mark_as_shipped(MarkOrderShippedCommand(order_id=order.id, tracking_number="1Z999"))
        assert result.error.code == "Order.PaymentRequired"

    def test_ship_and_deliver(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        mark_paid(order.id)

        shipped = order_service.mark_as_shipped(MarkOrderShippedCommand(order_id=order.id, tracking_number="1Z999"))
        assert shipped.value.status == "Shipped"
        assert shipped.value.metadata["trackingNumber"] == "1Z999"
        assert mail.outbox[-1].subject == "订单已发货"
        assert mail.outbox[-1].to == ["customer@example.com"]
        assert "1Z999" in mail.outbox[-1].body

        delivered = order_service.mark_as_delivered(MarkOrderDeliveredCommand(order_id=order.id))
        assert delivered.value.status == "Delivered"

    def test_deliver_requires_shipment(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        result = order_service.mark_as_delivered(MarkOrderDeliveredCommand(order_id=order.id))
        assert result.error.code == "Order.InvalidStatus"

    def test_invalid_status(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        result = order_service.update_status(UpdateOrderStatusCommand(order_id=order.id, status="Lost"))
        assert result.error.code == "Validation.status"

    def test_cached_order_reflects_status_change(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        assert order_service.get_order(order.id, customer.id).value.status == "Pending"

        order_service.update_status(UpdateOrderStatusCommand(order_id=order.id, status="Processing"))
        assert order_service.get_order(order.id, customer.id).value.status == "Processing"


@pytest.mark.django_db
class TestOrderCancellation:

    def test_customer_cancels_own_pending_order(self, order_service, place_order, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)

        result = order_service.cancel_order(CancelOrderCommand(order_id=order.id, user_id=customer.id, reason="误购"))
        assert result.value.status == "Cancelled"
        assert result.value.metadata["cancellationReason"] == "误购"

        again = order_service.cancel_order(CancelOrderCommand(order_id=order.id, user_id=customer.id))
        assert again.error.code == "Order.AlreadyCancelled"

    def test_other_customer_cannot_cancel(self, order_service, place_order, customer, other_customer,
                                          product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)

        result = order_service.cancel_order(CancelOrderCommand(order_id=order.id, user_id=other_customer.id))
        assert result.error.code == "Auth.Forbidden"
        assert order_service.get_order(order.id, other_customer.id).error.code == "Auth.Forbidden"

    def test_customer_cannot_cancel_shipped_order(self, order_service, place_order, customer, admin_user,
                                                  product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        mark_paid(order.id)
        order_service.mark_as_shipped(MarkOrderShippedCommand(order_id=order.id))

        result = order_service.cancel_order(CancelOrderCommand(order_id=order.id, user_id=customer.id))
        assert result.error.code == "Order.CannotCancel"

        by_staff = order_service.cancel_order(CancelOrderCommand(
            order_id=order.id, user_id=admin_user.id, is_staff=True
        ))
        assert by_staff.value.status == "Cancelled"


@pytest.mark.django_db
class TestSalesApi:

    def test_anonymous_cart_flow(self, api_client, product_with_variant):
        product, variant = product_with_variant
        response = api_client.post(
            "/v1/cart/items/", {"product_id": product.id, "variant_id": variant.id, "quantity": 2}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] is None
        assert data["total_items"] == 2
        assert data["subtotal"] == {"amount": "50.00", "currency": "USD"}

    def test_place_order(self, auth_client, customer, make_address, product_with_variant):
        product, variant = product_with_variant
        client = auth_client(customer)
        client.post("/v1/cart/items/", {"product_id": product.id, "variant_id": variant.id, "quantity": 2})
        address = make_address(customer)

        response = client.post("/v1/orders/", {"shipping_address_id": address.id})

        assert response.status_code == 201
        assert response.json()["data"]["total"] == {"amount": "59.00", "currency": "USD"}
        my_orders = client.get("/v1/orders/my-orders/").json()["data"]
        assert my_orders["pagination"]["total"] == 1

    def test_customer_cannot_change_status(self, auth_client, customer, place_order, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)

        response = auth_client(customer).put(f"/v1/orders/{order.id}/status/", {"status": "Shipped"})
        assert response.status_code == 403
