"""
审计日志和系统管理接口测试。
"""
import pytest

from audit.domain import AuditAction
from audit.infrastructure.factory import AuditInfrastructureFactory
from core.domain import DomainEvent
from core.infrastructure.cache import create_cache_service
from shipping.application import SetDefaultAddressCommand
from shipping.infrastructure.factory import ShippingInfrastructureFactory


class ShelfMovedEvent(DomainEvent):
    entity_type = "Shelf"
    entity_id_field = "shelf_id"

    def __init__(self, shelf_id, old_aisle, aisle):
        super().__init__()
        self.shelf_id = shelf_id
        self.old_aisle = old_aisle
        self.aisle = aisle


class UnscopedEvent(DomainEvent):
    pass


@pytest.fixture
def audit_service(db):
    return AuditInfrastructureFactory().create_audit_service()


class TestAuditAction:

    @pytest.mark.parametrize("event_name, action", [
        ("ProductCreatedEvent", "Create"),
        ("AddressDeletedEvent", "Delete"),
        ("OrderShippedEvent", "Update"),
    ])
    def test_for_event(self, event_name, action):
        assert AuditAction.for_event(event_name) == action


@pytest.mark.django_db
class TestAuditService:

    def test_old_values_are_split_out(self, audit_service):
        log = audit_service.record_event(ShelfMovedEvent("shelf-1", "A", "B"))

        assert (log.entity_type, log.entity_id, log.action) == ("Shelf", "shelf-1", "Update")
        assert log.old_values == {"aisle": "A"}
        assert log.new_values == {"event": "ShelfMovedEvent", "shelf_id": "shelf-1", "aisle": "B"}

    def test_event_without_entity_is_not_recorded(self, audit_service):
        assert audit_service.record_event(UnscopedEvent()) is None

    def test_saved_aggregates_are_audited(self, audit_service, make_address, customer):
        first = make_address(customer)
        second = make_address(customer)
        ShippingInfrastructureFactory().create_address_service().set_default_address(
            SetDefaultAddressCommand(second.id, customer.id)
        )

        created = audit_service.get_audit_logs(entity_type="Address", action="Create").value
        assert created.total == 2
        by_user = audit_service.get_audit_logs(entity_id=first.id, user_id=customer.id).value
        assert {log.action for log in by_user.items} == {"Create", "Update"}

    def test_invalid_action_filter(self, audit_service):
        assert audit_service.get_audit_logs(action="Purge").error.code == "Validation.action"


@pytest.mark.django_db
class TestAdministrationApi:

    def test_audit_logs_require_staff(self, auth_client, customer, admin_user, make_address):
        make_address(customer)

        assert auth_client(customer).get("/v1/audit-logs/").status_code == 403
        response = auth_client(admin_user).get("/v1/audit-logs/", {"entity_type": "Address"})
        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["total"] >= 1

    def test_cache_clear(self, auth_client, manager_user, customer):
        cache = create_cache_service()
        cache.set("product:1", "x")
        cache.set("category:1", "y")

        assert auth_client(customer).post("/v1/administration/cache/clear/").status_code == 403
        response = auth_client(manager_user).post("/v1/administration/cache/clear/")

        assert response.status_code == 200
        assert response.json()["data"] == {"cleared": 2}
        assert cache.get("product:1") is None
