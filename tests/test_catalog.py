"""
商品目录测试：分类树、商品、变体库存和目录接口权限。
"""
from decimal import Decimal

from django.core.files.storage import InMemoryStorage
import pytest

from catalog.application import (
    AddProductVariantCommand,
    ChangeProductStatusCommand,
    CreateAttributeCommand,
    CreateCategoryCommand,
    CreateProductCommand,
    DeleteCategoryCommand,
    ListProductsQuery,
    RemoveProductImageCommand,
    ReorderProductImagesCommand,
    SetDefaultProductImageCommand,
    UpdateCategoryParentCommand,
    UpdateVariantStockCommand,
    UploadProductImageCommand,
)
from catalog.infrastructure.factory import CatalogInfrastructureFactory
from core.domain import EntityNotFoundException, ErrorType
from core.infrastructure.storage import LocalStorageService


@pytest.fixture
def category_service(db):
    return CatalogInfrastructureFactory().create_category_service()


def create_category(service, name, slug, parent_id=None):
    result = service.create_category(CreateCategoryCommand(name=name, slug=slug, parent_id=parent_id))
    assert result.is_success, result.error
    return result.value


@pytest.mark.django_db
class TestCategoryService:

    def test_root_and_child_paths(self, category_service):
        root = create_category(category_service, "Clothing", "clothing")
        child = create_category(category_service, "Shirts", "shirts", root.id)

        assert (root.level, root.path) == (0, "/clothing")
        assert (child.level, child.path) == (1, "/clothing/shirts")
        assert child.parent_id == root.id

    def test_duplicate_slug(self, category_service):
        create_category(category_service, "Clothing", "clothing")
        result = category_service.create_category(CreateCategoryCommand(name="Other", slug="Clothing"))
        assert result.is_failure
        assert result.error.code == "Category.Duplicate"
        assert result.error.type == ErrorType.CONFLICT

    def test_cannot_move_under_own_descendant(self, category_service):
        root = create_category(category_service, "Clothing", "clothing")
        child = create_category(category_service, "Shirts", "shirts", root.id)

        result = category_service.update_parent(UpdateCategoryParentCommand(id=root.id, parent_id=child.id))
        assert result.is_failure
        assert result.error.code == "Category.CircularReference"

    def test_moving_category_rebases_descendants(self, category_service):
        clothing = create_category(category_service, "Clothing", "clothing")
        sale = create_category(category_service, "Sale", "sale")
        shirts = create_category(category_service, "Shirts", "shirts", clothing.id)
        create_category(category_service, "Polo", "polo", shirts.id)

        moved = category_service.update_parent(UpdateCategoryParentCommand(id=shirts.id, parent_id=sale.id))
        assert moved.is_success
        assert moved.value.path == "/sale/shirts"

        polo = category_service.get_category_by_slug("polo").value
        assert (polo.level, polo.path) == (2, "/sale/shirts/polo")

    def test_delete_rules(self, category_service, product_service):
        root = create_category(category_service, "Clothing", "clothing")
        child = create_category(category_service, "Shirts", "shirts", root.id)
        product_service.create_product(CreateProductCommand(
            name="Oxford Shirt", slug="oxford-shirt", base_price=Decimal("40"), category_ids=[child.id]
        ))

        has_children = category_service.delete_category(DeleteCategoryCommand(id=root.id))
        assert has_children.error.code == "Category.HasChildren"
        has_products = category_service.delete_category(DeleteCategoryCommand(id=child.id))
        assert has_products.error.code == "Category.HasProducts"

        empty = create_category(category_service, "Empty", "empty")
        assert category_service.delete_category(DeleteCategoryCommand(id=empty.id)).is_success
        assert category_service.get_category(empty.id).error.code == "Category.NotFound"


@pytest.mark.django_db
class TestProductService:

    def test_create_product_with_variant(self, product_with_variant, product_service):
        product, variant = product_with_variant
        loaded = product_service.get_product(product.id).value

        assert loaded.base_price.amount == Decimal("20.00")
        assert [v.sku for v in loaded.variants] == ["CLASSIC-TEE-M"]
        assert variant.price.amount == Decimal("25.00")
        assert variant.stock_quantity == 10

    def test_variant_without_price_uses_base_price(self, make_product):
        _, variant = make_product(slug="plain-tee", variant_price=None)
        assert variant.price.amount == Decimal("20.00")
        assert variant.has_custom_price is False

    def test_duplicate_slug_is_rejected(self, make_product, product_service):
        make_product()
        result = product_service.create_product(CreateProductCommand(
            name="Copy", slug="classic-tee", base_price=Decimal("1")
        ))
        assert result.error.code == "Product.Duplicate"

    def test_unknown_category_is_rejected(self, product_service):
        result = product_service.create_product(CreateProductCommand(
            name="Orphan", slug="orphan", base_price=Decimal("1"),
            category_ids=["7c9e6679-7425-40de-944b-e07fc1f90ae7"],
        ))
        assert result.error.code == "Category.NotFound"

    def test_stock_operations(self, product_with_variant, product_service):
        _, variant = product_with_variant

        added = product_service.update_variant_stock(UpdateVariantStockCommand(variant.id, 5, "add")).value
        assert added.stock_quantity == 15
        removed = product_service.update_variant_stock(UpdateVariantStockCommand(variant.id, 3, "remove")).value
        assert removed.stock_quantity == 12
        reset = product_service.update_variant_stock(UpdateVariantStockCommand(variant.id, 1, "set")).value
        assert reset.stock_quantity == 1

        too_many = product_service.update_variant_stock(UpdateVariantStockCommand(variant.id, 2, "remove"))
        assert too_many.error.code == "ProductVariant.InsufficientStock"
        unknown = product_service.update_variant_stock(UpdateVariantStockCommand(variant.id, 2, "double"))
        assert unknown.error.code == "Validation.operation"

    def test_get_variant_by_sku(self, product_with_variant, product_service):
        _, variant = product_with_variant
        assert product_service.get_variant_by_sku("CLASSIC-TEE-M").value.id == variant.id
        assert product_service.get_variant_by_sku("NOPE").error.code == "ProductVariant.NotFound"

    def test_cached_product_is_refreshed_after_change(self, product_with_variant, product_service):
        product, _ = product_with_variant
        assert product_service.get_product(product.id).value.is_active

        product_service.change_status(ChangeProductStatusCommand(id=product.id, is_active=False))
        assert product_service.get_product(product.id).value.is_active is False

    def test_list_products_filters(self, make_product, product_service):
        make_product(slug="classic-tee", base_price="20.00")
        make_product(slug="winter-coat", base_price="120.00", stock=0)

        found = product_service.list_products(ListProductsQuery(search="coat")).value
        assert [p.slug for p in found.items] == ["winter-coat"]

        cheap = product_service.list_products(ListProductsQuery(max_price=Decimal("50"))).value
        assert [p.slug for p in cheap.items] == ["classic-tee"]

        in_stock = product_service.list_products(ListProductsQuery(in_stock_only=True)).value
        assert [p.slug for p in in_stock.items] == ["classic-tee"]

        ordered = product_service.list_products(ListProductsQuery(sort_by="base_price", sort_direction="asc")).value
        assert [p.slug for p in ordered.items] == ["classic-tee", "winter-coat"]
        assert ordered.total == 2


@pytest.fixture
def attribute_service(db):
    return CatalogInfrastructureFactory().create_attribute_service()


@pytest.mark.django_db
class TestAttributeService:

    @pytest.fixture
    def color(self, attribute_service):
        return attribute_service.create_attribute(CreateAttributeCommand(
            name="color", display_name="Color", type="Color", is_variant=True
        )).value

    @pytest.fixture
    def material(self, attribute_service):
        return attribute_service.create_attribute(CreateAttributeCommand(
            name="material", display_name="Material", type="Text", filterable=True
        )).value

    def test_duplicate_name(self, attribute_service, color):
        result = attribute_service.create_attribute(CreateAttributeCommand(
            name=" color ", display_name="Colour", type="Color"
        ))
        assert result.error.code == "Attribute.Duplicate"

    def test_unknown_type(self, attribute_service):
        result = attribute_service.create_attribute(CreateAttributeCommand(
            name="shape", display_name="Shape", type="Polygon"
        ))
        assert result.error.code == "Validation.type"

    def test_variant_attributes_only(self, attribute_service, color, material):
        assert [a.name for a in attribute_service.get_all_attributes().value] == ["color", "material"]
        assert [a.name for a in attribute_service.get_variant_attributes().value] == ["color"]
        assert attribute_service.get_attribute_by_name("material").value.id == material.id

    def test_only_variant_attributes_can_be_set_on_variants(self, make_product, product_service, color, material):
        product, _ = make_product(with_variant=False)

        rejected = product_service.add_variant(AddProductVariantCommand(
            product_id=product.id, sku="TEE-COTTON", attributes={str(material.id): "cotton"}
        ))
        assert rejected.error.code == "ProductVariant.NonVariantAttribute"

        accepted = product_service.add_variant(AddProductVariantCommand(
            product_id=product.id, sku="TEE-RED", attributes={str(color.id): "red"}
        ))
        assert accepted.is_success
        assert [v.sku for v in product_service.get_product(product.id).value.variants] == ["TEE-RED"]

    def test_unknown_attribute_on_variant(self, make_product, product_service):
        product, _ = make_product(with_variant=False)
        result = product_service.add_variant(AddProductVariantCommand(
            product_id=product.id, attributes={"7c9e6679-7425-40de-944b-e07fc1f90ae7": "red"}
        ))
        assert result.error.code == "Attribute.NotFound"


@pytest.mark.django_db
class TestCatalogApi:

    def test_anyone_can_list_products(self, api_client, product_with_variant):
        response = api_client.get("/v1/products/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["pagination"]["total"] == 1
        assert body["data"]["items"][0]["slug"] == "classic-tee"

    def test_anonymous_create_requires_login(self, api_client):
        response = api_client.post("/v1/products/", {"name": "X", "slug": "x", "base_price": "1.00"})
        assert response.status_code == 401
        assert response.json()["code"] == 40100

    def test_customer_cannot_create_product(self, auth_client, customer):
        response = auth_client(customer).post("/v1/products/", {"name": "X", "slug": "x", "base_price": "1.00"})
        assert response.status_code == 403
        assert response.json()["code"] == 40300

    def test_manager_creates_product(self, auth_client, manager_user):
        response = auth_client(manager_user).post(
            "/v1/products/", {"name": "Linen Shirt", "slug": "linen-shirt", "base_price": "35.50"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["code"] == 10001
        assert body["data"]["base_price"] == {"amount": "35.50", "currency": "USD"}

    def test_invalid_payload(self, auth_client, admin_user):
        response = auth_client(admin_user).post("/v1/products/", {"name": "No price", "slug": "no-price"})
        assert response.status_code == 400
        assert response.json()["code"] == 40001

    def test_missing_product(self, api_client, db):
        response = api_client.get("/v1/products/7c9e6679-7425-40de-944b-e07fc1f90ae7/")
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == 40401
        assert body["data"]["code"] == "Product.NotFound"

    def test_invalid_token(self, api_client, db):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        response = api_client.get("/v1/products/")
        assert response.status_code == 401
        assert response.json()["code"] == 40102


@pytest.mark.django_db
class TestCategoryDataTable:

    @pytest.fixture
    def categories(self, category_service):
        clothing = create_category(category_service, "Clothing", "clothing")
        create_category(category_service, "Shirts", "shirts", clothing.id)
        create_category(category_service, "Shoes", "shoes")

    def request_body(self, **overrides):
        body = {
            "draw": 4,
            "start": 0,
            "length": 10,
            "search": {"value": "sh"},
            "columns": [{"data": "name"}, {"data": "slug"}],
            "order": [{"column": 0, "dir": "desc"}],
        }
        body.update(overrides)
        return body

    def test_search_order_and_counts(self, auth_client, admin_user, categories):
        response = auth_client(admin_user).post("/v1/categories/datatable/", self.request_body())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["draw"] == 4
        assert (data["recordsTotal"], data["recordsFiltered"]) == (3, 2)
        assert [row["name"] for row in data["data"]] == ["Shoes", "Shirts"]

    def test_paging_and_default_order(self, auth_client, admin_user, categories):
        client = auth_client(admin_user)

        paged = client.post("/v1/categories/datatable/", self.request_body(start=1, length=1)).json()["data"]
        assert [row["name"] for row in paged["data"]] == ["Shirts"]

        unordered = client.post("/v1/categories/datatable/", self.request_body(search={}, order=[])).json()["data"]
        assert unordered["recordsFiltered"] == 3
        assert [row["name"] for row in unordered["data"]] == ["Clothing", "Shirts", "Shoes"]

    def test_malformed_length(self, auth_client, admin_user, db):
        response = auth_client(admin_user).post(
            "/v1/categories/datatable/", {"draw": 1, "start": 0, "length": "abc"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 40001
        assert body["data"]["code"] == "Validation.length"

    def test_customer_is_forbidden(self, auth_client, customer):
        assert auth_client(customer).post("/v1/categories/datatable/", self.request_body()).status_code == 403


@pytest.fixture
def image_storage():
    return LocalStorageService(InMemoryStorage(base_url="/media/"))


@pytest.mark.django_db
class TestProductImages:

    @pytest.fixture
    def service(self, image_storage):
        return CatalogInfrastructureFactory(storage_service=image_storage).create_product_service()

    def test_upload_and_remove(self, service, image_storage, django_capture_on_commit_callbacks):
        product = service.create_product(CreateProductCommand(
            name="Canvas Bag", slug="canvas-bag", base_price=Decimal("15")
        )).value

        image = service.upload_image(UploadProductImageCommand(
            product_id=product.id, content=b"\x89PNG", filename="Front.PNG", content_type="image/png", size=4
        )).value

        assert image.image_key.startswith(f"products/{product.id}/")
        assert image.image_key.endswith(".png")
        assert image.is_default is True
        assert image_storage.download_file(image.image_key) == b"\x89PNG"

        with django_capture_on_commit_callbacks(execute=True):
            removed = service.remove_image(RemoveProductImageCommand(product.id, image.image_key))
        assert removed.is_success
        assert image_storage.file_exists(image.image_key) is False

    def test_unsupported_type(self, service, image_storage):
        product = service.create_product(CreateProductCommand(
            name="Canvas Bag", slug="canvas-bag", base_price=Decimal("15")
        )).value

        result = service.upload_image(UploadProductImageCommand(
            product_id=product.id, content=b"%PDF", filename="manual.pdf", content_type="application/pdf"
        ))
        assert result.error.code == "Validation.file"

    def test_default_and_display_order(self, service):
        product = service.create_product(CreateProductCommand(
            name="Canvas Bag", slug="canvas-bag", base_price=Decimal("15")
        )).value
        front, back = [
            service.upload_image(UploadProductImageCommand(
                product_id=product.id, content=b"\x89PNG", filename=name, content_type="image/png"
            )).value
            for name in ("front.png", "back.png")
        ]

        updated = service.set_default_image(SetDefaultProductImageCommand(product.id, back.image_key)).value
        assert {i.image_key: i.is_default for i in updated.images} == {front.image_key: False, back.image_key: True}

        reordered = service.reorder_images(ReorderProductImagesCommand(
            product.id, {back.image_key: 0, front.image_key: 1}
        )).value
        assert [i.image_key for i in reordered.images] == [back.image_key, front.image_key]
        stored = service.get_product(product.id).value
        assert [i.image_key for i in stored.images] == [back.image_key, front.image_key]

    def test_unknown_image_key(self, service):
        product = service.create_product(CreateProductCommand(
            name="Canvas Bag", slug="canvas-bag", base_price=Decimal("15")
        )).value

        missing = service.set_default_image(SetDefaultProductImageCommand(product.id, "products/none.png"))
        assert missing.error.code == "ProductImage.NotFound"
        reorder = service.reorder_images(ReorderProductImagesCommand(product.id, {"products/none.png": 0}))
        assert reorder.error.code == "ProductImage.NotFound"
        negative = service.reorder_images(ReorderProductImagesCommand(product.id, {"products/none.png": -1}))
        assert negative.error.code == "Validation.display_order"


class TestLocalStorageService:

    def test_round_trip_and_listing(self, image_storage):
        url = image_storage.upload_file("docs/readme.txt", b"hello", "text/plain")

        assert url == "/media/docs/readme.txt"
        assert image_storage.download_file("docs/readme.txt") == b"hello"
        assert [f["key"] for f in image_storage.list_files("docs/read")] == ["docs/readme.txt"]
        assert image_storage.delete_file("docs/readme.txt") is True
        assert image_storage.delete_file("docs/readme.txt") is False

    def test_missing_file(self, image_storage):
        with pytest.raises(EntityNotFoundException):
            image_storage.download_file("nope.txt")
