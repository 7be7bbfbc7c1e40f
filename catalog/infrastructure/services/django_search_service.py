"""
基于Django ORM的商品搜索服务实现。
商品被展开为搜索文档和分面值两张表，关键词匹配、筛选和分面统计都在数据库中完成。
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set, Tuple

from django.db import transaction
from django.db.models import Case, Count, Exists, IntegerField, Max, Min, OuterRef, Q, Value, When
from django.utils import timezone
from loguru import logger

from catalog.domain import ProductSearchService, SearchCriteria, SearchFacets, SearchResult
from catalog.infrastructure.models import (
    ProductModel,
    ProductSearchDocumentModel,
    ProductSearchFacetModel,
)

FACET_CATEGORY = "category"
FACET_ATTRIBUTE = "attribute"

SORT_FIELDS = {
    "name": "name",
    "price": "min_price",
    "created": "created_at",
    "updated": "updated_at",
    "stock": "total_stock",
}

REBUILD_BATCH_SIZE = 200


def _facet_text(value: Any) -> str:
    """把属性值转换为分面文本，{"value": x}形式的值取x"""
    if isinstance(value, dict) and "value" in value:
        value = value["value"]
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class DjangoProductSearchService(ProductSearchService):
    """
    基于Django ORM的商品搜索服务。
    """

    def _products(self):
        return ProductModel.objects.prefetch_related(
            "categories",
            "images",
            "variants",
            "attribute_values__attribute",
            "variants__attribute_values__attribute",
        )

    # ==================== 索引 ====================

    def index_product(self, product_id: Any) -> bool:
        model = self._products().filter(pk=product_id).first()
        if model is None:
            ProductSearchDocumentModel.objects.filter(product_id=product_id).delete()
            logger.debug(f"商品已从搜索索引移除: {product_id}")
            return False
        with transaction.atomic():
            self._write_document(model)
        return True

    def index_category_products(self, category_id: Any) -> int:
        return self._index_queryset(self._products().filter(categories__id=category_id).distinct())

    def index_attribute_products(self, attribute_id: Any) -> int:
        # 属性删除后关联值已级联删除，只能通过分面记录找到受影响的商品
        indexed = ProductSearchFacetModel.objects.filter(
            kind=FACET_ATTRIBUTE, source_id=str(attribute_id)
        ).values("document_id")
        return self._index_queryset(
            self._products().filter(
                Q(attribute_values__attribute_id=attribute_id)
                | Q(variants__attribute_values__attribute_id=attribute_id)
                | Q(pk__in=indexed)
            ).distinct()
        )

    def rebuild_index(self, clear_existing: bool = True) -> int:
        if clear_existing:
            ProductSearchDocumentModel.objects.all().delete()
        count = self._index_queryset(self._products().order_by("created_at", "id"))
        logger.info(f"搜索索引重建完成，共{count}个商品")
        return count

    def _index_queryset(self, queryset) -> int:
        count = 0
        ids = list(queryset.values_list("id", flat=True))
        for start in range(0, len(ids), REBUILD_BATCH_SIZE):
            batch = self._products().filter(pk__in=ids[start:start + REBUILD_BATCH_SIZE])
            with transaction.atomic():
                for model in batch:
                    self._write_document(model)
                    count += 1
        return count

    def _write_document(self, model: ProductModel) -> None:
        """生成商品的搜索文档并替换其分面值"""
        active_variants = [v for v in model.variants.all() if v.is_active]
        prices = [
            v.price_amount if v.price_amount is not None else model.base_price_amount
            for v in active_variants
        ] or [model.base_price_amount]
        total_stock = sum(v.stock_quantity for v in active_variants)
        default_image = next(
            (i for i in model.images.all() if i.variant_id is None and i.is_default), None
        )

        facets, searchable_values = self._collect_facets(model, active_variants)
        search_text = " ".join(
            part for part in [
                model.name,
                model.description or "",
                model.sku or "",
                model.slug,
                *[v.sku for v in active_variants if v.sku],
                *[c.name for c in model.categories.all()],
                *searchable_values,
            ] if part
        ).lower()

        document, _ = ProductSearchDocumentModel.objects.update_or_create(
            product_id=model.id,
            defaults={
                "name": model.name,
                "slug": model.slug,
                "sku": model.sku or "",
                "description": model.description or "",
                "search_text": search_text,
                "base_price": model.base_price_amount,
                "currency": model.base_price_currency,
                "min_price": min(prices),
                "max_price": max(prices),
                "is_active": model.is_active,
                "has_stock": total_stock > 0,
                "total_stock": total_stock,
                "variant_skus": [v.sku for v in active_variants if v.sku],
                "default_image_key": default_image.image_key if default_image else "",
                "created_at": model.created_at,
                "updated_at": model.updated_at,
                "indexed_at": timezone.now(),
            },
        )
        ProductSearchFacetModel.objects.filter(document=document).delete()
        ProductSearchFacetModel.objects.bulk_create([
            ProductSearchFacetModel(
                document=document, kind=kind, name=name, value=value, label=label, source_id=source_id
            )
            for kind, name, value, label, source_id in facets
        ])

    @staticmethod
    def _collect_facets(model: ProductModel, active_variants) -> Tuple[List[tuple], List[str]]:
        """
        收集商品的分面值。
        商品属性只收录可筛选或变体属性，启用变体上的属性值全部收录。

        Returns:
            (分面值列表, 可搜索属性值列表)
        """
        facets: List[tuple] = []
        seen: Set[tuple] = set()
        searchable: List[str] = []

        for category in model.categories.all():
            facets.append((FACET_CATEGORY, category.slug, str(category.id), category.name, str(category.id)))

        def add_attribute(attribute, raw_value):
            text = _facet_text(raw_value)
            if not text:
                return
            if attribute.searchable:
                searchable.append(text)
            key = (attribute.name.lower(), text)
            if key not in seen:
                seen.add(key)
                facets.append((FACET_ATTRIBUTE, key[0], text[:255], attribute.display_name, str(attribute.id)))

        for item in model.attribute_values.all():
            if item.attribute.filterable or item.attribute.is_variant or item.attribute.searchable:
                add_attribute(item.attribute, item.value)
        for variant in active_variants:
            for item in variant.attribute_values.all():
                add_attribute(item.attribute, item.value)
        return facets, searchable

    # ==================== 搜索 ====================

    def search(self, criteria: SearchCriteria) -> SearchResult:
        queryset = self._filter(criteria)
        total = queryset.count()
        offset = (criteria.page - 1) * criteria.page_size
        documents = list(
            self._order(queryset, criteria).prefetch_related("facets")[offset:offset + criteria.page_size]
        )
        logger.debug(f"商品搜索: keyword={criteria.keyword!r}, total={total}")
        return SearchResult(
            items=[self._to_item(d) for d in documents],
            total=total,
            page=criteria.page,
            page_size=criteria.page_size,
            facets=self._facets(queryset),
            query=criteria.keyword,
        )

    def _filter(self, criteria: SearchCriteria):
        queryset = ProductSearchDocumentModel.objects.all()
        if criteria.active_only:
            queryset = queryset.filter(is_active=True)
        for term in criteria.keyword.lower().split():
            queryset = queryset.filter(search_text__icontains=term)

        facets = ProductSearchFacetModel.objects.filter(document=OuterRef("pk"))
        if criteria.category_ids or criteria.category_slugs:
            queryset = queryset.filter(Exists(facets.filter(
                Q(value__in=criteria.category_ids) | Q(name__in=criteria.category_slugs),
                kind=FACET_CATEGORY,
            )))
        for name, values in criteria.attribute_filters.items():
            queryset = queryset.filter(Exists(facets.filter(kind=FACET_ATTRIBUTE, name=name, value__in=values)))

        # 价格区间与商品的价格范围有交集即命中
        if criteria.price_min is not None:
            queryset = queryset.filter(max_price__gte=criteria.price_min)
        if criteria.price_max is not None:
            queryset = queryset.filter(min_price__lte=criteria.price_max)
        if criteria.in_stock_only:
            queryset = queryset.filter(has_stock=True)
        return queryset

    @staticmethod
    def _order(queryset, criteria: SearchCriteria):
        field = SORT_FIELDS.get(criteria.sort_by)
        if field:
            return queryset.order_by(f"-{field}" if criteria.sort_descending else field, "product_id")
        if criteria.keyword:
            queryset = queryset.annotate(rank=Case(
                When(name__iexact=criteria.keyword, then=Value(0)),
                When(name__icontains=criteria.keyword, then=Value(1)),
                default=Value(2),
                output_field=IntegerField(),
            ))
            return queryset.order_by("rank", "name", "product_id")
        return queryset.order_by("-created_at", "product_id")

    @staticmethod
    def _facets(queryset) -> SearchFacets:
        rows = (
            ProductSearchFacetModel.objects
            .filter(document__in=queryset.values("pk"))
            .values("kind", "name", "value", "label")
            .annotate(count=Count("document", distinct=True))
            .order_by("kind", "name", "-count", "value")
        )
        categories = []
        attributes: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            if row["kind"] == FACET_CATEGORY:
                categories.append({
                    "id": row["value"], "name": row["label"], "slug": row["name"], "count": row["count"],
                })
            else:
                facet = attributes.setdefault(
                    row["name"], {"name": row["name"], "display_name": row["label"], "values": []}
                )
                facet["values"].append({"value": row["value"], "count": row["count"]})
        categories.sort(key=lambda c: (-c["count"], c["name"]))

        prices = queryset.aggregate(price_min=Min("min_price"), price_max=Max("max_price"))
        return SearchFacets(
            categories=categories,
            attributes=list(attributes.values()),
            price_min=prices["price_min"],
            price_max=prices["price_max"],
        )

    @staticmethod
    def _money(amount: Optional[Decimal], currency: str) -> Dict[str, str]:
        return {"amount": str(amount), "currency": currency}

    def _to_item(self, document: ProductSearchDocumentModel) -> Dict[str, Any]:
        facets = list(document.facets.all())
        attributes: Dict[str, List[str]] = {}
        for facet in facets:
            if facet.kind == FACET_ATTRIBUTE:
                attributes.setdefault(facet.name, []).append(facet.value)
        return {
            "id": str(document.product_id),
            "name": document.name,
            "slug": document.slug,
            "sku": document.sku or None,
            "description": document.description,
            "base_price": self._money(document.base_price, document.currency),
            "price_range": {
                "min": self._money(document.min_price, document.currency),
                "max": self._money(document.max_price, document.currency),
            },
            "is_active": document.is_active,
            "has_stock": document.has_stock,
            "total_stock": document.total_stock,
            "variant_skus": document.variant_skus,
            "default_image_key": document.default_image_key or None,
            "categories": [
                {"id": f.value, "name": f.label, "slug": f.name} for f in facets if f.kind == FACET_CATEGORY
            ],
            "attributes": attributes,
            "created_at": document.created_at.isoformat(),
            "updated_at": document.updated_at.isoformat(),
        }
