"""
基于Django ORM的分类仓储实现。
实现领域仓储接口，处理领域对象与数据库模型之间的转换。
"""
from typing import Any, Dict, List, Optional, Tuple

from core.application.pagination import DataTableRequest
from core.domain import Slug
from core.infrastructure.repositories import DjangoRepositoryMixin, apply_datatable, paginate_queryset
from catalog.domain import Category, CategoryRepository
from catalog.infrastructure.models import CategoryModel, ProductModel


class DjangoCategoryRepository(DjangoRepositoryMixin, CategoryRepository):
    """
    基于Django ORM的分类仓储实现。
    """

    model_class = CategoryModel
    entity_name = "Category"

    DATATABLE_COLUMNS = {
        "name": "name",
        "slug": "slug",
        "level": "level",
        "path": "path",
        "is_active": "is_active",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    def _to_domain(self, model: CategoryModel) -> Category:
        return Category(
            id=model.id,
            name=model.name,
            slug=Slug(model.slug),
            description=model.description,
            parent_id=model.parent_id,
            level=model.level,
            path=model.path,
            is_active=model.is_active,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, category: Category) -> Dict[str, Any]:
        return {
            "name": category.name,
            "slug": category.slug.value,
            "description": category.description,
            "parent_id": category.parent_id,
            "level": category.level,
            "path": category.path,
            "is_active": category.is_active,
        }

    def save(self, category: Category) -> Category:
        self._persist(category)
        self._dispatch_events(category)
        return category

    def get_by_slug(self, slug: str) -> Optional[Category]:
        model = CategoryModel.objects.filter(slug=slug).first()
        return self._to_domain(model) if model else None

    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        queryset = CategoryModel.objects.filter(slug=slug)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def get_all(self) -> List[Category]:
        return [self._to_domain(m) for m in CategoryModel.objects.order_by("path")]

    def get_roots(self) -> List[Category]:
        return [self._to_domain(m) for m in CategoryModel.objects.filter(parent__isnull=True).order_by("name")]

    def get_children(self, parent_id: Any) -> List[Category]:
        return [self._to_domain(m) for m in CategoryModel.objects.filter(parent_id=parent_id).order_by("name")]

    def get_descendants(self, category: Category) -> List[Category]:
        queryset = CategoryModel.objects.filter(path__startswith=category.path + "/").order_by("level")
        return [self._to_domain(m) for m in queryset]

    def has_children(self, category_id: Any) -> bool:
        return CategoryModel.objects.filter(parent_id=category_id).exists()

    def count_products(self, category_id: Any) -> int:
        return ProductModel.objects.filter(categories__id=category_id).count()

    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[Category], int]:
        queryset = CategoryModel.objects.all()
        if filters.get("parent_id"):
            queryset = queryset.filter(parent_id=filters["parent_id"])
        if filters.get("active_only"):
            queryset = queryset.filter(is_active=True)
        models, total = paginate_queryset(queryset.order_by("path"), page, page_size)
        return [self._to_domain(m) for m in models], total

    def datatable(self, request: DataTableRequest) -> Tuple[List[Category], int, int]:
        models, total, filtered = apply_datatable(
            CategoryModel.objects.all(),
            request,
            search_fields=("name", "slug", "description"),
            column_map=self.DATATABLE_COLUMNS,
            default_ordering=("path",),
        )
        return [self._to_domain(m) for m in models], total, filtered
