"""
地址测试：默认地址规则和归属校验。
"""
import pytest

from shipping.application import DeleteAddressCommand, SetDefaultAddressCommand, UpdateAddressCommand
from shipping.infrastructure.factory import ShippingInfrastructureFactory


@pytest.fixture
def address_service(db):
    return ShippingInfrastructureFactory().create_address_service()


def defaults(service, user):
    return {a.id: a.is_default for a in service.get_user_addresses(user.id).value}


@pytest.mark.django_db
class TestAddressDefaults:

    def test_first_address_becomes_default(self, make_address, customer):
        first = make_address(customer)
        second = make_address(customer)
        assert first.is_default is True
        assert second.is_default is False

    def test_new_default_replaces_old_of_same_type(self, make_address, address_service, customer):
        first = make_address(customer)
        billing = make_address(customer, address_type="Billing", is_default=True)
        second = make_address(customer, is_default=True)

        assert defaults(address_service, customer) == {first.id: False, billing.id: True, second.id: True}

    def test_both_type_overlaps_every_type(self, make_address, address_service, customer):
        shipping = make_address(customer)
        billing = make_address(customer, address_type="Billing", is_default=True)
        both = make_address(customer, address_type="Both", is_default=True)

        assert defaults(address_service, customer) == {shipping.id: False, billing.id: False, both.id: True}
        assert address_service.get_default_address(customer.id, "Billing").value.id == both.id

    def test_set_default(self, make_address, address_service, customer):
        first = make_address(customer)
        second = make_address(customer)

        result = address_service.set_default_address(SetDefaultAddressCommand(second.id, customer.id))
        assert result.value.is_default is True
        assert defaults(address_service, customer) == {first.id: False, second.id: True}

    def test_deleting_default_promotes_oldest_remaining(self, make_address, address_service, customer):
        first = make_address(customer)
        second = make_address(customer, city="Shelbyville")
        third = make_address(customer, city="Capital City")

        assert address_service.delete_address(DeleteAddressCommand(first.id, customer.id)).is_success
        assert defaults(address_service, customer) == {second.id: True, third.id: False}

    def test_deleting_shipping_default_keeps_billing_default(self, make_address, address_service, customer):
        first = make_address(customer)
        billing = make_address(customer, address_type="Billing", is_default=True)
        spare = make_address(customer, city="Shelbyville")

        address_service.delete_address(DeleteAddressCommand(first.id, customer.id))

        assert defaults(address_service, customer) == {billing.id: True, spare.id: True}
        assert address_service.get_default_address(customer.id, "Shipping").value.id == spare.id

    def test_deleting_both_default_promotes_each_type(self, make_address, address_service, customer):
        both = make_address(customer, address_type="Both")
        shipping = make_address(customer, city="Shelbyville")
        billing = make_address(customer, address_type="Billing", city="Capital City")

        address_service.delete_address(DeleteAddressCommand(both.id, customer.id))

        assert defaults(address_service, customer) == {shipping.id: True, billing.id: True}

    def test_unknown_default_type(self, address_service, customer):
        assert address_service.get_default_address(customer.id, "Pickup").error.code == "Validation.address_type"


@pytest.mark.django_db
class TestAddressOwnership:

    def test_other_users_address_is_not_found(self, make_address, address_service, customer, other_customer):
        address = make_address(customer)

        assert address_service.get_address(address.id, other_customer.id).error.code == "Address.NotFound"
        delete = address_service.delete_address(DeleteAddressCommand(address.id, other_customer.id))
        assert delete.error.code == "Address.NotFound"

    def test_update_address(self, make_address, address_service, customer):
        address = make_address(customer)
        result = address_service.update_address(UpdateAddressCommand(
            id=address.id,
            user_id=customer.id,
            address_line1="1 Infinite Loop",
            city="Cupertino",
            state="CA",
            country="US",
            postal_code="95014",
        ))

        assert result.value.postal_address["city"] == "Cupertino"
        assert address_service.get_address(address.id, customer.id).value.postal_address["city"] == "Cupertino"


@pytest.mark.django_db
class TestAddressApi:

    def test_create_and_list(self, auth_client, customer):
        client = auth_client(customer)
        response = client.post("/v1/addresses/", {
            "address_line1": "742 Evergreen Terrace",
            "city": "Springfield",
            "state": "IL",
            "country": "US",
            "postal_code": "62704",
            "address_type": "Shipping",
            "is_default": False,
        })

        assert response.status_code == 201
        assert response.json()["data"]["is_default"] is True
        listed = client.get("/v1/addresses/").json()["data"]
        assert len(listed) == 1

    def test_requires_authentication(self, api_client, db):
        assert api_client.get("/v1/addresses/").status_code == 401
