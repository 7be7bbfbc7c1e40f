"""
基于Django ORM的属性仓储实现。
"""
from typing import Any, Dict, List, Optional, Tuple

from core.application.pagination import DataTableRequest
from core.infrastructure.repositories import DjangoRepositoryMixin, apply_datatable, paginate_queryset
from catalog.domain import Attribute, AttributeRepository
from catalog.infrastructure.models import AttributeModel


class DjangoAttributeRepository(DjangoRepositoryMixin, AttributeRepository):
    """基于Django ORM的属性仓储实现"""

    model_class = AttributeModel
    entity_name = "Attribute"

    DATATABLE_COLUMNS = {
        "name": "name",
        "display_name": "display_name",
        "type": "type",
        "filterable": "filterable",
        "searchable": "searchable",
        "is_variant": "is_variant",
        "created_at": "created_at",
    }

    def _to_domain(self, model: AttributeModel) -> Attribute:
        return Attribute(
            id=model.id,
            name=model.name,
            display_name=model.display_name,
            type=model.type,
            configuration=model.configuration,
            filterable=model.filterable,
            searchable=model.searchable,
            is_variant=model.is_variant,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, attribute: Attribute) -> Dict[str, Any]:
        return {
            "name": attribute.name,
            "display_name": attribute.display_name,
            "type": attribute.type,
            "configuration": attribute.configuration,
            "filterable": attribute.filterable,
            "searchable": attribute.searchable,
            "is_variant": attribute.is_variant,
        }

    def save(self, attribute: Attribute) -> Attribute:
        self._persist(attribute)
        self._dispatch_events(attribute)
        return attribute

    def get_by_name(self, name: str) -> Optional[Attribute]:
        model = AttributeModel.objects.filter(name=name).first()
        return self._to_domain(model) if model else None

    def name_exists(self, name: str, exclude_id: Any = None) -> bool:
        queryset = AttributeModel.objects.filter(name=name)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def get_all(self) -> List[Attribute]:
        return [self._to_domain(m) for m in AttributeModel.objects.order_by("name")]

    def get_variant_attributes(self) -> List[Attribute]:
        return [self._to_domain(m) for m in AttributeModel.objects.filter(is_variant=True).order_by("name")]

    def get_by_ids(self, ids: List[Any]) -> Dict[str, Attribute]:
        models = AttributeModel.objects.filter(pk__in=list(ids))
        return {str(m.id): self._to_domain(m) for m in models}

    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[Attribute], int]:
        queryset = AttributeModel.objects.order_by("name")
        if filters.get("is_variant") is not None:
            queryset = queryset.filter(is_variant=filters["is_variant"])
        models, total = paginate_queryset(queryset, page, page_size)
        return [self._to_domain(m) for m in models], total

    def datatable(self, request: DataTableRequest) -> Tuple[List[Attribute], int, int]:
        models, total, filtered = apply_datatable(
            AttributeModel.objects.all(),
            request,
            search_fields=("name", "display_name", "type"),
            column_map=self.DATATABLE_COLUMNS,
            default_ordering=("name",),
        )
        return [self._to_domain(m) for m in models], total, filtered
