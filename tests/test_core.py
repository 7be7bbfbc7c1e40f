"""
核心领域模型和基础设施测试。
"""
from decimal import Decimal
import fnmatch

import pytest

from core.application.pagination import DataTableRequest, PaginatedResult
from core.application.services import service_operation
from core.domain import (
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainEvent,
    DomainEvents,
    Email,
    EntityNotFoundException,
    ErrorType,
    Money,
    PhoneNumber,
    PostalAddress,
    Slug,
    ValidationException,
)
from core.infrastructure.cache import MemoryCacheService, RedisCacheService
from core.infrastructure.response import ApiResponseBuilder
from core.infrastructure.transaction import NoOpTransactionManager


class SampleEvent(DomainEvent):
    entity_type = "Sample"
    entity_id_field = "sample_id"

    def __init__(self, sample_id, note=None):
        super().__init__()
        self.sample_id = sample_id
        self.note = note


class DerivedSampleEvent(SampleEvent):
    pass


class TestMoney:

    def test_arithmetic(self):
        total = Money("10.50") + Money("4.50")
        assert total == Money("15")
        assert (total - Money("5")).amount == Decimal("10.00")
        assert (Money("19.99") * 3).amount == Decimal("59.97")

    def test_negative_amount_is_rejected(self):
        with pytest.raises(ValidationException) as exc:
            Money("-1")
        assert exc.value.code == "Validation.amount"

    def test_subtraction_below_zero_is_rejected(self):
        with pytest.raises(ValidationException):
            Money("1") - Money("2")

    def test_currency_mismatch(self):
        with pytest.raises(BusinessRuleViolationException) as exc:
            Money("1", "USD") + Money("1", "EUR")
        assert exc.value.code == "Money.CurrencyMismatch"

    def test_rounded_and_to_dict(self):
        money = (Money("10.00") * Decimal("0.085")).rounded()
        assert money.to_dict() == {"amount": "0.85", "currency": "USD"}
        assert Money.zero().is_zero()

    def test_create_returns_failure_result(self):
        result = Money.create("abc")
        assert result.is_failure
        assert result.error.type == ErrorType.VALIDATION


class TestSimpleValueObjects:

    def test_email_is_lowercased(self):
        assert Email("  John.Doe@Example.COM ").value == "john.doe@example.com"

    def test_invalid_email(self):
        with pytest.raises(ValidationException):
            Email("not-an-email")

    def test_slug_normalization(self):
        assert Slug("  Summer Sale -- 2024! ").value == "summer-sale-2024"
        with pytest.raises(ValidationException):
            Slug("!!!")

    def test_phone_number(self):
        assert PhoneNumber("+1 (555) 123-4567").value == "+15551234567"
        with pytest.raises(ValidationException):
            PhoneNumber("12")

    def test_postal_address_requires_fields(self):
        with pytest.raises(ValidationException) as exc:
            PostalAddress("1 Main St", "", "CA", "US", "90001")
        assert exc.value.code == "Validation.city"


class TestServiceOperation:

    def test_wraps_value_and_domain_errors(self):
        @service_operation("测试")
        def ok():
            return 42

        @service_operation("测试")
        def missing():
            raise EntityNotFoundException("Product", "p1")

        assert ok().value == 42
        result = missing()
        assert result.is_failure
        assert result.error.code == "Product.NotFound"
        assert result.error.type == ErrorType.NOT_FOUND
        with pytest.raises(ValueError):
            result.value

    def test_other_exceptions_propagate(self):
        @service_operation("测试")
        def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            broken()


@pytest.mark.django_db
class TestDomainEvents:

    def setup_method(self):
        self.received = []

    def _handler(self, event):
        self.received.append(event)

    def test_handlers_on_base_class_receive_subclass_events(self):
        DomainEvents.register(SampleEvent, self._handler)
        try:
            DomainEvents.publish(DerivedSampleEvent("s1"))
        finally:
            DomainEvents.unregister(SampleEvent, self._handler)
        assert [e.sample_id for e in self.received] == ["s1"]

    def test_round_trip_through_dict(self):
        event = SampleEvent("s1", note="hello")
        restored = DomainEvents.resolve("SampleEvent").from_dict(event.to_dict())
        assert restored.sample_id == "s1"
        assert restored.note == "hello"
        assert restored.entity_id == "s1"
        assert restored.id == str(event.id)


class TestMemoryCacheService:

    def test_get_set_and_patterns(self):
        cache = MemoryCacheService()
        cache.set("product:1", "a")
        cache.set("product:2", "b")
        cache.set("category:1", "c")
        assert cache.get("product:1") == "a"
        assert cache.delete_pattern("product:*") == 2
        assert cache.get("product:2") is None
        assert cache.exists("category:1")
        assert cache.clear() == 1

    def test_expired_entries_are_dropped(self):
        cache = MemoryCacheService()
        cache.set("k", "v", ttl=0)
        assert cache.get("k") is None

    def test_get_or_set_skips_none(self):
        cache = MemoryCacheService()
        calls = []

        def factory():
            calls.append(1)
            return None

        assert cache.get_or_set("missing", factory) is None
        assert cache.get_or_set("missing", factory) is None
        assert len(calls) == 2

    def test_maxsize_evicts_oldest(self):
        cache = MemoryCacheService(maxsize=2)
        cache.set("a", 1, ttl=10)
        cache.set("b", 2, ttl=100)
        cache.set("c", 3, ttl=100)
        assert cache.get("a") is None
        assert cache.get("c") == 3

    def test_each_key_keeps_its_own_ttl(self):
        clock = FakeClock()
        cache = MemoryCacheService(default_ttl=60, timer=clock)
        cache.set("short", 1, ttl=5)
        cache.set("long", 2, ttl=50)
        cache.set("default", 3)

        clock.now = 10
        assert cache.get("short") is None
        assert cache.get("long") == 2

        clock.now = 55
        assert cache.get("long") is None
        assert cache.get("default") == 3
        assert cache.clear() == 1

    def test_overwrite_restarts_ttl(self):
        clock = FakeClock()
        cache = MemoryCacheService(timer=clock)
        cache.set("k", "old", ttl=5)
        clock.now = 4
        cache.set("k", "new", ttl=5)
        clock.now = 8
        assert cache.get("k") == "new"


class FakeClock:

    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


class FakeRedis:
    """多个缓存服务实例共享的内存Redis客户端"""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def exists(self, key):
        return int(key in self.data)

    def scan_iter(self, match="*", count=None):
        return [key for key in list(self.data) if fnmatch.fnmatchcase(key, match)]


class TestRedisCacheService:

    def test_invalidation_from_another_worker_is_seen_for_products(self):
        client = FakeRedis()
        reader = RedisCacheService(client)
        writer = RedisCacheService(client)
        writer.set("product:1", {"name": "Tee"})
        assert reader.get("product:1") == {"name": "Tee"}

        writer.delete_pattern("product:*")

        assert reader.get("product:1") is None

    def test_other_keys_are_served_from_local_layer(self):
        client = FakeRedis()
        cache = RedisCacheService(client)
        cache.set("category:1", "Clothing")
        client.data.clear()

        assert cache.get("category:1") == "Clothing"
        assert cache.get("product:1") is None

    def test_local_layer_can_be_disabled(self):
        client = FakeRedis()
        cache = RedisCacheService(client, local_cache_size=0)
        cache.set("category:1", "Clothing")
        client.data.clear()

        assert cache.get("category:1") is None


class TestNoOpTransactionManager:

    def test_commit_callbacks_run_after_block(self):
        manager = NoOpTransactionManager()
        calls = []
        with manager.start():
            manager.on_commit(lambda: calls.append("done"))
            assert calls == []
        assert calls == ["done"]


class TestPaginatedResult:

    def test_page_flags(self):
        result = PaginatedResult(items=[1, 2], total=5, page=2, page_size=2)
        assert result.total_pages == 3
        assert result.has_previous
        assert result.has_next
        assert result.to_dict()["pageSize"] == 2


class TestDataTableRequest:

    def test_parses_protocol_fields(self):
        request = DataTableRequest.from_dict({
            "draw": "3",
            "start": "20",
            "length": "10",
            "search": {"value": "  shirt "},
            "columns": [{"data": "name"}, {"data": "slug", "orderable": False}],
            "order": [{"column": "1", "dir": "asc"}, {"column": 0, "dir": "DESC"}],
        })

        assert (request.draw, request.start, request.length) == (3, 20, 10)
        assert request.search == "shirt"
        assert request.ordering() == [("name", True)]

    def test_defaults_and_show_all(self):
        request = DataTableRequest.from_dict({"length": -1})
        assert (request.draw, request.start, request.length) == (1, 0, -1)
        assert request.ordering() == []

    @pytest.mark.parametrize("data, field", [
        ({"length": "abc"}, "length"),
        ({"draw": [1]}, "draw"),
        ({"start": -5}, "start"),
        ({"order": [{"column": "first"}]}, "order"),
        ({"columns": "name"}, "columns"),
    ])
    def test_malformed_input_is_a_validation_error(self, data, field):
        with pytest.raises(ValidationException) as exc:
            DataTableRequest.from_dict(data)
        assert exc.value.code == f"Validation.{field}"


@pytest.mark.django_db
class TestOptimisticConcurrency:

    def test_stale_save_is_rejected_as_conflict(self):
        from catalog.application import CreateCategoryCommand
        from catalog.infrastructure.factory import CatalogInfrastructureFactory
        from catalog.infrastructure.repositories import DjangoCategoryRepository

        created = CatalogInfrastructureFactory().create_category_service().create_category(
            CreateCategoryCommand(name="Clothing", slug="clothing")
        ).value
        repository = DjangoCategoryRepository()
        first = repository.get_by_id(created.id)
        second = repository.get_by_id(created.id)

        first.deactivate()
        repository.save(first)
        assert first.version == 2

        second.update("Apparel", "apparel")
        with pytest.raises(ConcurrencyException) as exc:
            repository.save(second)

        error = exc.value.to_error()
        assert error.code == "Category.ConcurrencyConflict"
        assert error.type == ErrorType.CONFLICT
        assert ApiResponseBuilder.from_error(error).status_code == 409
        assert repository.get_by_id(created.id).name == "Clothing"
