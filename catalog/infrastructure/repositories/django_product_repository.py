"""
基于Django ORM的商品仓储实现。
商品聚合包含分类关联、属性值、变体和图片，保存时在同一事务中同步到各自的表。
"""
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Q, QuerySet
from loguru import logger

from core.application.pagination import DataTableRequest
from core.domain import Money, Slug
from core.infrastructure.repositories import DjangoRepositoryMixin, apply_datatable, paginate_queryset
from catalog.domain import Product, ProductImage, ProductRepository, ProductVariant
from catalog.infrastructure.models import (
    ProductAttributeModel,
    ProductImageModel,
    ProductModel,
    ProductVariantModel,
    VariantAttributeModel,
)

SORT_FIELDS = {
    "name": "name",
    "base_price": "base_price_amount",
    "price": "base_price_amount",
    "created_at": "created_at",
    "updated_at": "updated_at",
}


class DjangoProductRepository(DjangoRepositoryMixin, ProductRepository):
    """
    基于Django ORM的商品仓储实现。
    """

    model_class = ProductModel
    entity_name = "Product"

    DATATABLE_COLUMNS = {
        "name": "name",
        "slug": "slug",
        "sku": "sku",
        "base_price": "base_price_amount",
        "is_active": "is_active",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    def _queryset(self) -> QuerySet:
        return ProductModel.objects.prefetch_related(
            "categories",
            "attribute_values",
            "images",
            "variants__attribute_values",
        )

    @staticmethod
    def _images_to_domain(image_models) -> List[ProductImage]:
        return [
            ProductImage(m.image_key, m.alt_text, m.is_default, m.display_order)
            for m in image_models
        ]

    def _to_domain(self, model: ProductModel) -> Product:
        """
        将数据库模型转换为商品聚合根。

        Args:
            model: 商品数据库模型，关联数据应已预加载

        Returns:
            商品聚合根
        """
        images = list(model.images.all())
        variants = []
        for variant_model in model.variants.all():
            price = None
            if variant_model.price_amount is not None:
                price = Money(variant_model.price_amount, variant_model.price_currency or model.base_price_currency)
            variants.append(ProductVariant(
                id=variant_model.id,
                product_id=model.id,
                sku=variant_model.sku,
                price=price,
                stock_quantity=variant_model.stock_quantity,
                is_active=variant_model.is_active,
                metadata=variant_model.metadata,
                attributes={str(a.attribute_id): a.value for a in variant_model.attribute_values.all()},
                images=self._images_to_domain(i for i in images if i.variant_id == variant_model.id),
                created_at=variant_model.created_at,
                updated_at=variant_model.updated_at,
            ))
        variants.sort(key=lambda v: v.created_at)

        return Product(
            id=model.id,
            name=model.name,
            slug=Slug(model.slug),
            base_price=Money(model.base_price_amount, model.base_price_currency),
            description=model.description,
            sku=model.sku,
            is_active=model.is_active,
            metadata=model.metadata,
            category_ids=[c.id for c in model.categories.all()],
            attributes={str(a.attribute_id): a.value for a in model.attribute_values.all()},
            images=self._images_to_domain(i for i in images if i.variant_id is None),
            variants=variants,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, product: Product) -> Dict[str, Any]:
        return {
            "name": product.name,
            "slug": product.slug.value,
            "description": product.description,
            "base_price_amount": product.base_price.amount,
            "base_price_currency": product.base_price.currency,
            "sku": product.sku,
            "is_active": product.is_active,
            "metadata": product.metadata,
        }

    @staticmethod
    def _variant_values(variant: ProductVariant) -> Dict[str, Any]:
        return {
            "sku": variant.sku,
            "price_amount": variant.price.amount if variant.price else None,
            "price_currency": variant.price.currency if variant.price else None,
            "stock_quantity": variant.stock_quantity,
            "is_active": variant.is_active,
            "metadata": variant.metadata,
            "created_at": variant.created_at,
            "updated_at": variant.updated_at,
        }

    def _save_images(self, product: Product) -> None:
        ProductImageModel.objects.filter(product_id=product.id).delete()
        rows = [
            ProductImageModel(product_id=product.id, **image.to_dict())
            for image in product.images
        ]
        for variant in product.variants:
            rows.extend(
                ProductImageModel(product_id=product.id, variant_id=variant.id, **image.to_dict())
                for image in variant.images
            )
        ProductImageModel.objects.bulk_create(rows)

    def _save_attributes(self, product: Product) -> None:
        ProductAttributeModel.objects.filter(product_id=product.id).delete()
        ProductAttributeModel.objects.bulk_create([
            ProductAttributeModel(product_id=product.id, attribute_id=attribute_id, value=value)
            for attribute_id, value in product.attributes.items()
        ])
        VariantAttributeModel.objects.filter(variant__product_id=product.id).delete()
        VariantAttributeModel.objects.bulk_create([
            VariantAttributeModel(variant_id=variant.id, attribute_id=attribute_id, value=value)
            for variant in product.variants
            for attribute_id, value in variant.attributes.items()
        ])

    def save(self, product: Product) -> Product:
        """
        保存商品聚合根及其子实体。

        Args:
            product: 商品聚合根

        Returns:
            保存后的商品聚合根

        Raises:
            ConcurrencyException: 版本冲突
        """
        with transaction.atomic():
            self._persist(product)
            model = ProductModel.objects.get(pk=product.id)
            model.categories.set(product.category_ids)
            self._sync_children(
                ProductVariantModel, {"product_id": product.id}, product.variants, self._variant_values
            )
            self._save_attributes(product)
            self._save_images(product)
            self._dispatch_events(product)
        logger.debug(f"商品已保存: {product.id} v{product.version}")
        return product

    def get_by_id(self, id: Any) -> Optional[Product]:
        model = self._queryset().filter(pk=id).first()
        return self._to_domain(model) if model else None

    def get_by_slug(self, slug: str) -> Optional[Product]:
        model = self._queryset().filter(slug=slug).first()
        return self._to_domain(model) if model else None

    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        queryset = ProductModel.objects.filter(slug=slug)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def sku_exists(self, sku: str, exclude_id: Any = None) -> bool:
        queryset = ProductModel.objects.filter(sku=sku)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def variant_sku_exists(self, sku: str, exclude_variant_id: Any = None) -> bool:
        queryset = ProductVariantModel.objects.filter(sku=sku)
        if exclude_variant_id is not None:
            queryset = queryset.exclude(pk=exclude_variant_id)
        return queryset.exists()

    def get_by_variant_id(self, variant_id: Any) -> Optional[Product]:
        model = self._queryset().filter(variants__id=variant_id).first()
        return self._to_domain(model) if model else None

    def get_by_variant_sku(self, sku: str) -> Optional[Product]:
        model = self._queryset().filter(variants__sku=sku).first()
        return self._to_domain(model) if model else None

    def search(
        self,
        search: Optional[str] = None,
        category_id: Any = None,
        min_price: Any = None,
        max_price: Any = None,
        active_only: bool = False,
        in_stock_only: bool = False,
        sort_by: str = "created_at",
        sort_desc: bool = True,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Product], int]:
        queryset = ProductModel.objects.all()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(description__icontains=search) | Q(sku__icontains=search)
            )
        if category_id:
            queryset = queryset.filter(categories__id=category_id)
        if min_price is not None:
            queryset = queryset.filter(base_price_amount__gte=min_price)
        if max_price is not None:
            queryset = queryset.filter(base_price_amount__lte=max_price)
        if active_only:
            queryset = queryset.filter(is_active=True)
        if in_stock_only:
            queryset = queryset.filter(variants__stock_quantity__gt=0, variants__is_active=True)

        field = SORT_FIELDS.get(sort_by, "created_at")
        queryset = queryset.distinct().order_by(f"-{field}" if sort_desc else field, "id")

        models, total = paginate_queryset(queryset, page, page_size)
        products = self._load([m.id for m in models])
        return products, total

    def _load(self, ids: List[Any]) -> List[Product]:
        """按给定顺序加载完整的商品聚合"""
        by_id = {m.id: m for m in self._queryset().filter(pk__in=ids)}
        return [self._to_domain(by_id[i]) for i in ids if i in by_id]

    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[Product], int]:
        return self.search(page=page, page_size=page_size, **filters)

    def datatable(self, request: DataTableRequest) -> Tuple[List[Product], int, int]:
        models, total, filtered = apply_datatable(
            ProductModel.objects.all(),
            request,
            search_fields=("name", "slug", "sku", "description"),
            column_map=self.DATATABLE_COLUMNS,
        )
        return self._load([m.id for m in models]), total, filtered
