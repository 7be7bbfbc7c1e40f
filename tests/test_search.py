"""
商品搜索测试：关键词、分类和属性筛选、价格区间、分面统计以及索引维护。
"""
from decimal import Decimal

from django.core.management import call_command
import pytest

from catalog.application import (
    AddProductVariantCommand,
    ChangeProductStatusCommand,
    CreateAttributeCommand,
    CreateCategoryCommand,
    CreateProductCommand,
    DeleteAttributeCommand,
    RebuildSearchIndexCommand,
    SearchProductsQuery,
)
from catalog.infrastructure.factory import CatalogInfrastructureFactory
from catalog.infrastructure.models import ProductSearchDocumentModel


@pytest.fixture
def factory(db):
    return CatalogInfrastructureFactory()


@pytest.fixture
def search_service(factory):
    return factory.create_search_service()


@pytest.fixture
def catalog(factory):
    """两个分类、两个属性和四个商品，其中一个已下架"""
    categories = factory.create_category_service()
    attributes = factory.create_attribute_service()
    products = factory.create_product_service()

    clothing = categories.create_category(CreateCategoryCommand(name="Clothing", slug="clothing")).value
    shoes = categories.create_category(CreateCategoryCommand(name="Shoes", slug="shoes")).value
    color = attributes.create_attribute(CreateAttributeCommand(
        name="Color", display_name="Color", type="Color", is_variant=True
    )).value
    material = attributes.create_attribute(CreateAttributeCommand(
        name="material", display_name="Material", type="Text", filterable=True
    )).value

    def product(name, slug, price, category, attributes=None, variants=(), is_active=True):
        created = products.create_product(CreateProductCommand(
            name=name,
            slug=slug,
            base_price=Decimal(price),
            category_ids=[category.id],
            attributes=attributes or {},
            is_active=is_active,
        )).value
        for sku, value, variant_price, stock in variants:
            products.add_variant(AddProductVariantCommand(
                product_id=created.id,
                sku=sku,
                price=Decimal(variant_price) if variant_price else None,
                stock_quantity=stock,
                attributes={str(color.id): value},
            ))
        return created

    return {
        "clothing": clothing,
        "shoes": shoes,
        "tee": product("Classic Tee", "classic-tee", "20.00", clothing, {str(material.id): "cotton"}, [
            ("TEE-RED", "red", "25.00", 10),
            ("TEE-BLUE", "blue", None, 0),
        ]),
        "shirt": product("Linen Shirt", "linen-shirt", "40.00", clothing, {str(material.id): "linen"}, [
            ("SHIRT-RED", "red", None, 5),
        ]),
        "runner": product("Trail Runner", "trail-runner", "90.00", shoes),
        "old": product("Old Tee", "old-tee", "10.00", clothing, is_active=False),
    }


def slugs(result):
    return sorted(item["slug"] for item in result.value.items)


@pytest.mark.django_db
class TestProductSearch:

    def test_keyword_matches_active_products(self, search_service, catalog):
        result = search_service.search_products(SearchProductsQuery(keyword="tee"))

        assert slugs(result) == ["classic-tee"]
        assert result.value.total == 1
        assert result.value.items[0]["price_range"]["min"]["amount"] == "20.00"
        assert result.value.items[0]["price_range"]["max"]["amount"] == "25.00"

    def test_keyword_matches_variant_sku_and_category_name(self, search_service, catalog):
        assert slugs(search_service.search_products(SearchProductsQuery(keyword="shirt-red"))) == ["linen-shirt"]
        assert slugs(search_service.search_products(SearchProductsQuery(keyword="shoes"))) == ["trail-runner"]

    def test_attribute_filters(self, search_service, catalog):
        red = search_service.search_products(SearchProductsQuery(attribute_filters={"color": ["red"]}))
        assert slugs(red) == ["classic-tee", "linen-shirt"]

        red_linen = search_service.search_products(SearchProductsQuery(
            attribute_filters={"Color": ["red"], "material": ["linen"]}
        ))
        assert slugs(red_linen) == ["linen-shirt"]

        either = search_service.search_products(SearchProductsQuery(attribute_filters={"color": ["blue", "green"]}))
        assert slugs(either) == ["classic-tee"]

    def test_multiple_categories(self, search_service, catalog):
        shoes = search_service.search_products(SearchProductsQuery(category_ids=[catalog["shoes"].id]))
        assert slugs(shoes) == ["trail-runner"]

        both = search_service.search_products(SearchProductsQuery(
            category_ids=[catalog["shoes"].id], category_slugs=["clothing"]
        ))
        assert slugs(both) == ["classic-tee", "linen-shirt", "trail-runner"]

    def test_price_range_overlaps_variant_prices(self, search_service, catalog):
        expensive = search_service.search_products(SearchProductsQuery(price_min=Decimal("24")))
        assert slugs(expensive) == ["classic-tee", "linen-shirt", "trail-runner"]

        cheap = search_service.search_products(SearchProductsQuery(price_max=Decimal("21")))
        assert slugs(cheap) == ["classic-tee"]

        invalid = search_service.search_products(SearchProductsQuery(price_min=Decimal("50"), price_max=Decimal("10")))
        assert invalid.error.code == "Validation.price_min"

    def test_in_stock_and_inactive(self, search_service, catalog):
        in_stock = search_service.search_products(SearchProductsQuery(in_stock_only=True))
        assert slugs(in_stock) == ["classic-tee", "linen-shirt"]

        everything = search_service.search_products(SearchProductsQuery(active_only=False))
        assert everything.value.total == 4

    def test_sort_and_pages(self, search_service, catalog):
        first = search_service.search_products(SearchProductsQuery(
            sort_by="price", sort_descending=True, page_size=2
        )).value
        assert [i["slug"] for i in first.items] == ["trail-runner", "linen-shirt"]
        assert (first.total, first.total_pages, first.has_next) == (3, 2, True)

        second = search_service.search_products(SearchProductsQuery(
            sort_by="price", sort_descending=True, page=2, page_size=2
        )).value
        assert [i["slug"] for i in second.items] == ["classic-tee"]

        unknown = search_service.search_products(SearchProductsQuery(sort_by="popularity"))
        assert unknown.error.code == "Validation.sort_by"

    def test_facets_count_matching_products(self, search_service, catalog):
        facets = search_service.search_products(SearchProductsQuery()).value.facets

        assert [(c["slug"], c["count"]) for c in facets.categories] == [("clothing", 2), ("shoes", 1)]
        by_name = {a["name"]: {v["value"]: v["count"] for v in a["values"]} for a in facets.attributes}
        assert by_name == {"color": {"red": 2, "blue": 1}, "material": {"cotton": 1, "linen": 1}}
        assert (facets.price_min, facets.price_max) == (Decimal("20"), Decimal("90"))

        filtered = search_service.search_products(SearchProductsQuery(attribute_filters={"material": ["linen"]}))
        assert [(c["slug"], c["count"]) for c in filtered.value.facets.categories] == [("clothing", 1)]


@pytest.mark.django_db
class TestSearchIndexMaintenance:

    def test_product_changes_update_index(self, factory, search_service, catalog):
        assert slugs(search_service.search_products(SearchProductsQuery(keyword="runner"))) == ["trail-runner"]

        factory.create_product_service().change_status(
            ChangeProductStatusCommand(id=catalog["runner"].id, is_active=False)
        )

        assert search_service.search_products(SearchProductsQuery(keyword="runner")).value.total == 0

    def test_deleted_attribute_leaves_facets(self, factory, search_service, catalog):
        attributes = factory.create_attribute_service()
        material = attributes.get_attribute_by_name("material").value

        attributes.delete_attribute(DeleteAttributeCommand(id=material.id))

        facets = search_service.search_products(SearchProductsQuery()).value.facets
        assert [a["name"] for a in facets.attributes] == ["color"]
        linen = search_service.search_products(SearchProductsQuery(attribute_filters={"material": ["linen"]}))
        assert linen.value.total == 0

    def test_rebuild_restores_index(self, search_service, catalog):
        ProductSearchDocumentModel.objects.all().delete()
        search_service.cache_service.clear()
        assert search_service.search_products(SearchProductsQuery()).value.total == 0

        rebuilt = search_service.rebuild_search_index(RebuildSearchIndexCommand()).value

        assert rebuilt.products_indexed == 4
        assert search_service.search_products(SearchProductsQuery()).value.total == 3

    def test_management_command(self, catalog, capsys):
        ProductSearchDocumentModel.objects.all().delete()

        call_command("rebuild_search_index")

        assert "4" in capsys.readouterr().out
        assert ProductSearchDocumentModel.objects.count() == 4


@pytest.mark.django_db
class TestSearchApi:

    def test_search_with_attribute_filter(self, api_client, catalog):
        response = api_client.get("/v1/products/search/", {"q": "shirt", "attr_color": "red,blue"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [i["slug"] for i in data["items"]] == ["linen-shirt"]
        assert data["total"] == 1
        assert data["facets"]["categories"][0]["slug"] == "clothing"

    def test_repeated_and_comma_separated_categories(self, api_client, catalog):
        response = api_client.get(
            f"/v1/products/search/?category_ids={catalog['shoes'].id}&category_slugs=clothing&sort_by=name"
        )
        names = [i["name"] for i in response.json()["data"]["items"]]
        assert names == ["Classic Tee", "Linen Shirt", "Trail Runner"]

    def test_inactive_products_only_for_staff(self, api_client, auth_client, admin_user, catalog):
        anonymous = api_client.get("/v1/products/search/", {"active_only": "false"}).json()["data"]
        assert anonymous["total"] == 3

        staff = auth_client(admin_user).get("/v1/products/search/", {"active_only": "false"}).json()["data"]
        assert staff["total"] == 4

    def test_invalid_parameters(self, api_client, db):
        bad_price = api_client.get("/v1/products/search/", {"price_min": "abc"})
        assert bad_price.status_code == 400

        reversed_range = api_client.get("/v1/products/search/", {"price_min": "50", "price_max": "10"})
        assert reversed_range.status_code == 400
        assert reversed_range.json()["data"]["code"] == "Validation.price_min"

    def test_rebuild_requires_staff(self, auth_client, customer, manager_user, catalog):
        assert auth_client(customer).post("/v1/administration/search/rebuild/", {}).status_code == 403

        response = auth_client(manager_user).post("/v1/administration/search/rebuild/", {"clear_existing": True})
        assert response.status_code == 200
        assert response.json()["data"]["products_indexed"] == 4
