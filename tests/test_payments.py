"""
支付测试：支付方式管理、订单支付、退款、回调幂等以及Stripe网关的异常转换。
"""
from decimal import Decimal
import json

import pytest
import stripe

from core.domain import Money, ValidationException
from core.domain.exceptions import ExternalServiceException
from payments.application import (
    AddPaymentMethodCommand,
    DeletePaymentMethodCommand,
    ProcessOrderPaymentCommand,
    ProcessWebhookCommand,
    RefundOrderCommand,
)
from payments.domain import PaymentDeclinedException, PaymentStatus
from payments.infrastructure.factory import PaymentsInfrastructureFactory
from payments.infrastructure.providers import PaymentResult, StripePaymentProvider, create_payment_provider
from payments.infrastructure.repositories import DjangoPaymentMethodRepository, DjangoPaymentRepository
from sales.infrastructure.factory import SalesInfrastructureFactory


class FakeStripeProvider(StripePaymentProvider):
    """不访问网络的Stripe网关，回调解析沿用真实实现"""

    def __init__(self):
        super().__init__("sk_test_dummy")
        self.status = PaymentStatus.SUCCEEDED
        self.decline = None
        self.calls = []

    def process_payment(self, amount, payment_method_token, customer_id=None, metadata=None):
        self.calls.append(("charge", amount, payment_method_token, customer_id))
        if self.decline is not None:
            raise self.decline
        return PaymentResult(
            transaction_id="pi_test_1",
            status=self.status,
            client_secret="pi_test_1_secret",
            requires_action=self.status == PaymentStatus.REQUIRES_ACTION,
        )

    def refund_payment(self, transaction_id, amount=None, reason=None):
        self.calls.append(("refund", transaction_id, amount))
        return f"re_test_{len(self.calls)}"

    def create_customer(self, user_id, email, metadata=None):
        self.calls.append(("customer", email))
        return "cus_test_1"

    def attach_payment_method(self, payment_method_token, customer_id):
        self.calls.append(("attach", payment_method_token, customer_id))
        return payment_method_token

    def count(self, kind):
        return len([c for c in self.calls if c[0] == kind])


@pytest.fixture
def provider():
    return FakeStripeProvider()


@pytest.fixture
def payments_factory(db, provider):
    return PaymentsInfrastructureFactory(provider_factory=lambda name: provider)


@pytest.fixture
def payment_service(payments_factory):
    return payments_factory.create_payment_service()


@pytest.fixture
def method_service(payments_factory):
    return payments_factory.create_payment_method_service()


@pytest.fixture
def order_service(db):
    return SalesInfrastructureFactory().create_order_service()


def add_card(service, user, token="pm_card_visa", **overrides):
    values = dict(
        user_id=user.id,
        type="CreditCard",
        provider="Stripe",
        token=token,
        user_email=user.email.value,
        card_brand="Visa",
        last_four_digits="4242",
        expiry_month=12,
        expiry_year=2099,
    )
    values.update(overrides)
    return service.add_payment_method(AddPaymentMethodCommand(**values))


@pytest.fixture
def paid_setup(place_order, method_service, payment_service, customer, product_with_variant):
    """下单并用银行卡支付成功，返回(订单DTO, 支付DTO)"""
    product, variant = product_with_variant
    order = place_order(customer, product, variant)
    card = add_card(method_service, customer).value
    payment = payment_service.process_order_payment(ProcessOrderPaymentCommand(order.id, customer.id, card.id))
    assert payment.is_success, payment.error
    return order, payment.value


@pytest.mark.django_db
class TestPaymentMethods:

    def test_first_card_is_default_and_customer_is_reused(self, method_service, provider, customer):
        first = add_card(method_service, customer).value
        second = add_card(method_service, customer, token="pm_card_mastercard", card_brand="Mastercard").value

        assert first.is_default is True
        assert second.is_default is False
        assert provider.count("customer") == 1
        assert provider.count("attach") == 2
        stored = DjangoPaymentMethodRepository().get_by_id(second.id)
        assert stored.metadata["stripe_customer_id"] == "cus_test_1"
        assert "stripe_customer_id" not in second.metadata

    def test_duplicate_token(self, method_service, customer):
        add_card(method_service, customer)
        assert add_card(method_service, customer).error.code == "PaymentMethod.Duplicate"

    def test_customer_creation_needs_email(self, method_service, customer):
        assert add_card(method_service, customer, user_email=None).error.code == "Validation.email"

    def test_expired_card(self, method_service, provider, customer):
        result = add_card(method_service, customer, expiry_year=2020)
        assert result.error.code == "PaymentMethod.ExpiredCard"
        assert provider.calls == []

    def test_paypal_skips_gateway(self, method_service, provider, customer):
        result = method_service.add_payment_method(AddPaymentMethodCommand(
            user_id=customer.id, type="PayPal", provider="PayPal", token="BA-123", email="buyer@example.com"
        ))
        assert result.value.type == "PayPal"
        assert provider.calls == []

    def test_deleting_default_promotes_oldest(self, method_service, customer):
        first = add_card(method_service, customer).value
        second = add_card(method_service, customer, token="pm_card_amex", card_brand="Amex").value

        assert method_service.delete_payment_method(DeletePaymentMethodCommand(first.id, customer.id)).is_success
        methods = method_service.get_user_payment_methods(customer.id).value
        assert [(m.id, m.is_default) for m in methods] == [(second.id, True)]

    def test_other_users_method_is_hidden(self, method_service, customer, other_customer):
        card = add_card(method_service, customer).value
        assert method_service.get_payment_method(card.id, other_customer.id).error.code == "PaymentMethod.NotFound"


@pytest.mark.django_db
class TestOrderPayment:

    def test_successful_payment_marks_order_paid(self, paid_setup, order_service, provider, customer):
        order, payment = paid_setup

        assert payment.status == "Succeeded"
        assert payment.transaction_id == "pi_test_1"
        charge = next(c for c in provider.calls if c[0] == "charge")
        assert charge[1] == Money("59.00")
        assert charge[3] == "cus_test_1"

        loaded = order_service.get_order(order.id, customer.id).value
        assert (loaded.status, loaded.payment_status) == ("Processing", "Succeeded")

    def test_paid_order_cannot_be_paid_again(self, paid_setup, payment_service, method_service, customer):
        order, payment = paid_setup
        again = payment_service.process_order_payment(
            ProcessOrderPaymentCommand(order.id, customer.id, payment.payment_method_id)
        )
        assert again.error.code == "Order.AlreadyPaid"

    def test_declined_payment_is_recorded(self, place_order, method_service, payment_service, order_service,
                                          provider, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        card = add_card(method_service, customer).value
        provider.decline = PaymentDeclinedException("余额不足", code="Payment.InsufficientFunds")

        result = payment_service.process_order_payment(ProcessOrderPaymentCommand(order.id, customer.id, card.id))

        assert result.error.code == "Payment.InsufficientFunds"
        payments = payment_service.get_order_payments(order.id, customer.id).value
        assert [(p.status, p.error_message) for p in payments] == [("Failed", "余额不足")]
        assert order_service.get_order(order.id, customer.id).value.payment_status == "Failed"

    def test_other_user_cannot_pay(self, place_order, method_service, payment_service, customer, other_customer,
                                   product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        card = add_card(method_service, other_customer).value

        result = payment_service.process_order_payment(
            ProcessOrderPaymentCommand(order.id, other_customer.id, card.id)
        )
        assert result.error.code == "Auth.Forbidden"

    def test_foreign_payment_method(self, place_order, method_service, payment_service, customer, other_customer,
                                    product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        card = add_card(method_service, other_customer).value

        result = payment_service.process_order_payment(ProcessOrderPaymentCommand(order.id, customer.id, card.id))
        assert result.error.code == "PaymentMethod.NotFound"


@pytest.mark.django_db
class TestRefunds:

    def test_full_refund(self, paid_setup, payment_service, provider):
        order, _ = paid_setup

        refund = payment_service.refund_order(RefundOrderCommand(order.id, reason="requested_by_customer")).value

        assert refund.is_full is True
        assert refund.payment_status == "Refunded"
        assert refund.amount.amount == Decimal("59.00")
        assert provider.calls[-1] == ("refund", "pi_test_1", None)

    def test_partial_refunds_accumulate(self, paid_setup, payment_service):
        order, _ = paid_setup

        first = payment_service.refund_order(RefundOrderCommand(order.id, amount=Decimal("20.00"))).value
        assert first.is_full is False
        assert first.refunded_total.amount == Decimal("20.00")

        too_much = payment_service.refund_order(RefundOrderCommand(order.id, amount=Decimal("40.00")))
        assert too_much.error.code == "Order.RefundExceedsTotal"

        rest = payment_service.refund_order(RefundOrderCommand(order.id, amount=Decimal("39.00"))).value
        assert rest.is_full is True
        assert rest.payment_status == "Refunded"

    def test_unpaid_order_has_nothing_to_refund(self, place_order, payment_service, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        result = payment_service.refund_order(RefundOrderCommand(order.id))
        assert result.error.code == "Payment.NotFound"

    def test_rejected_refund_never_reaches_gateway(self, paid_setup, payment_service, provider):
        order, payment = paid_setup
        repository = DjangoPaymentRepository()
        stored = repository.get_by_id(payment.id)
        stored.refunded_amount = Money("50.00")
        repository.save(stored)

        result = payment_service.refund_order(RefundOrderCommand(order.id, amount=Decimal("20.00")))

        assert result.error.code == "Payment.RefundExceedsAmount"
        assert provider.count("refund") == 0


def intent_event(event_id, event_type, intent_id, order_id=None):
    return json.dumps({
        "id": event_id,
        "type": event_type,
        "data": {"object": {"id": intent_id, "metadata": {"orderId": order_id} if order_id else {}}},
    })


@pytest.mark.django_db
class TestWebhooks:

    def test_succeeded_event_completes_pending_payment(self, place_order, method_service, payment_service,
                                                       order_service, provider, customer, product_with_variant):
        product, variant = product_with_variant
        order = place_order(customer, product, variant)
        card = add_card(method_service, customer).value
        provider.status = PaymentStatus.PROCESSING
        payment = payment_service.process_order_payment(
            ProcessOrderPaymentCommand(order.id, customer.id, card.id)
        ).value
        assert payment.status == "Processing"

        payload = intent_event("evt_1", "payment_intent.succeeded", "pi_test_1", order.id)
        result = payment_service.process_webhook(ProcessWebhookCommand("Stripe", payload)).value

        assert result.payment_status == "Succeeded"
        assert result.order_id == order.id
        loaded = order_service.get_order(order.id, customer.id).value
        assert (loaded.status, loaded.payment_status) == ("Processing", "Succeeded")

    def test_repeated_event_is_ignored(self, payment_service):
        payload = intent_event("evt_2", "payment_intent.canceled", "pi_unknown")

        first = payment_service.process_webhook(ProcessWebhookCommand("Stripe", payload)).value
        second = payment_service.process_webhook(ProcessWebhookCommand("Stripe", payload)).value

        assert first.processing_message == "支付已取消"
        assert second.processing_message == "事件已处理"

    def test_unhandled_event_type(self, payment_service):
        payload = json.dumps({"id": "evt_3", "type": "customer.deleted", "data": {"object": {}}})
        result = payment_service.process_webhook(ProcessWebhookCommand("Stripe", payload)).value
        assert result.is_processed is True
        assert result.processing_message == "未处理的事件类型: customer.deleted"

    def test_malformed_payload(self, payment_service):
        result = payment_service.process_webhook(ProcessWebhookCommand("Stripe", "not json"))
        assert result.error.code == "Validation.payload"

    def test_webhook_endpoint(self, api_client, db):
        payload = intent_event("evt_4", "payment_intent.payment_failed", "pi_missing")
        response = api_client.post(
            "/v1/payments/webhooks/Stripe/process/", data=payload, content_type="application/json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["payment_status"] == "Failed"

    def test_unsupported_provider_endpoint(self, api_client, db):
        response = api_client.post(
            "/v1/payments/webhooks/Square/process/", data="{}", content_type="application/json"
        )
        assert response.status_code == 400
        assert response.json()["data"]["code"] == "Validation.provider"


class TestStripePaymentProvider:

    def test_process_payment(self, monkeypatch):
        captured = {}

        def create(**params):
            captured.update(params)
            return {"id": "pi_1", "status": "succeeded", "client_secret": "pi_1_secret"}

        monkeypatch.setattr(stripe.PaymentIntent, "create", create)
        result = StripePaymentProvider("sk_test_key").process_payment(
            Money("59.00"), "pm_card_visa", customer_id="cus_1", metadata={"orderId": "o1"}
        )

        assert result.status == PaymentStatus.SUCCEEDED
        assert result.requires_action is False
        assert captured["amount"] == 5900
        assert captured["currency"] == "usd"
        assert captured["customer"] == "cus_1"
        assert captured["api_key"] == "sk_test_key"

    def test_requires_action(self, monkeypatch):
        monkeypatch.setattr(stripe.PaymentIntent, "create", lambda **params: {
            "id": "pi_2", "status": "requires_action", "client_secret": "s", "next_action": {"type": "use_stripe_sdk"},
        })
        result = StripePaymentProvider("sk_test_key").process_payment(Money("10"), "pm_card_3ds")

        assert result.status == PaymentStatus.REQUIRES_ACTION
        assert result.requires_action is True
        assert result.next_action_type == "use_stripe_sdk"

    def test_card_error_is_translated(self, monkeypatch):
        def create(**params):
            raise stripe.CardError("Your card was declined.", None, "card_declined")

        monkeypatch.setattr(stripe.PaymentIntent, "create", create)
        with pytest.raises(PaymentDeclinedException) as exc:
            StripePaymentProvider("sk_test_key").process_payment(Money("10"), "pm_card_declined")
        assert exc.value.code == "Payment.CardDeclined"
        assert exc.value.message == "银行卡被拒绝"

    def test_connection_error_is_external_failure(self, monkeypatch):
        def create(**params):
            raise stripe.APIConnectionError("network unreachable")

        monkeypatch.setattr(stripe.PaymentIntent, "create", create)
        with pytest.raises(ExternalServiceException) as exc:
            StripePaymentProvider("sk_test_key").process_payment(Money("10"), "pm_card_visa")
        assert exc.value.code == "Payment.ProcessingFailed"

    def test_partial_refund_parameters(self, monkeypatch):
        captured = {}

        def create(**params):
            captured.update(params)
            return {"id": "re_1"}

        monkeypatch.setattr(stripe.Refund, "create", create)
        refund_id = StripePaymentProvider("sk_test_key").refund_payment("pi_1", Money("10.00"), "changed my mind")

        assert refund_id == "re_1"
        assert captured["amount"] == 1000
        assert captured["reason"] == "requested_by_customer"
        assert captured["payment_intent"] == "pi_1"

    def test_invalid_signature(self):
        provider = StripePaymentProvider("sk_test_key", webhook_secret="whsec_test")
        with pytest.raises(ValidationException) as exc:
            provider.process_webhook(intent_event("evt_5", "payment_intent.succeeded", "pi_1"), "bad-signature")
        assert exc.value.code == "Validation.signature"

    def test_unknown_provider(self):
        with pytest.raises(ValidationException):
            create_payment_provider("PayPal")
