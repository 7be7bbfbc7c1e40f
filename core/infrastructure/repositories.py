"""
Django仓储公共实现。
提供乐观锁持久化、事件分发以及分页和数据表查询的辅助方法。
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from django.db import models
from django.db.models import Q, QuerySet

from core.application.pagination import DataTableRequest
from core.domain.aggregates import AggregateRoot
from core.domain.exceptions import ConcurrencyException
from core.infrastructure.events import DomainEventDispatcher, create_event_dispatcher


class DjangoRepositoryMixin:
    """
    Django仓储的公共基类。

    子类需要设置model_class和entity_name，并实现_to_domain和_to_model_values。
    """

    model_class: Type[models.Model] = None
    entity_name: str = "Entity"

    def __init__(self, event_dispatcher: Optional[DomainEventDispatcher] = None):
        self.event_dispatcher = event_dispatcher or create_event_dispatcher()

    def _to_domain(self, model: models.Model) -> AggregateRoot:
        raise NotImplementedError

    def _to_model_values(self, aggregate: AggregateRoot) -> Dict[str, Any]:
        raise NotImplementedError

    def _persist(self, aggregate: AggregateRoot) -> None:
        """
        以乐观锁方式写入聚合根的主表记录。

        新聚合(version=0)插入版本1；已存在的聚合只有在数据库版本与聚合版本一致时才更新，
        并把版本号加一。

        Raises:
            ConcurrencyException: 版本不一致
        """
        values = self._to_model_values(aggregate)
        values["updated_at"] = aggregate.updated_at

        if aggregate.version == 0:
            if self.model_class.objects.filter(pk=aggregate.id).exists():
                raise ConcurrencyException(self.entity_name, aggregate.id)
            self.model_class.objects.create(
                id=aggregate.id, version=1, created_at=aggregate.created_at, **values
            )
            aggregate.mark_persisted(1)
            return

        next_version = aggregate.version + 1
        updated = self.model_class.objects.filter(
            pk=aggregate.id, version=aggregate.version
        ).update(version=next_version, **values)
        if not updated:
            raise ConcurrencyException(self.entity_name, aggregate.id)
        aggregate.mark_persisted(next_version)

    def _dispatch_events(self, aggregate: AggregateRoot) -> None:
        events = aggregate.clear_domain_events()
        if events:
            self.event_dispatcher.dispatch(events)

    def _sync_children(
        self,
        model_class: Type[models.Model],
        parent_filter: Dict[str, Any],
        children: Iterable[Any],
        to_values: Callable[[Any], Dict[str, Any]]
    ) -> None:
        """
        同步聚合内子实体：更新或创建现有子实体，删除已移除的子实体。

        Args:
            model_class: 子实体模型类
            parent_filter: 定位所属聚合的过滤条件
            children: 当前的子实体集合
            to_values: 子实体到模型字段的转换函数
        """
        children = list(children)
        model_class.objects.filter(**parent_filter).exclude(id__in=[c.id for c in children]).delete()
        for child in children:
            model_class.objects.update_or_create(id=child.id, defaults={**parent_filter, **to_values(child)})

    def _get_model(self, id: Any) -> Optional[models.Model]:
        return self.model_class.objects.filter(pk=id).first()

    def get_by_id(self, id: Any) -> Optional[AggregateRoot]:
        model = self._get_model(id)
        return self._to_domain(model) if model else None

    def delete(self, entity: AggregateRoot) -> None:
        deleted, _ = self.model_class.objects.filter(pk=entity.id, version=entity.version).delete()
        if not deleted and self.model_class.objects.filter(pk=entity.id).exists():
            raise ConcurrencyException(self.entity_name, entity.id)
        self._dispatch_events(entity)


def paginate_queryset(queryset: QuerySet, page: int, page_size: int) -> Tuple[List[Any], int]:
    """
    对查询集分页。

    Returns:
        当前页模型列表和总数
    """
    total = queryset.count()
    offset = (page - 1) * page_size
    return list(queryset[offset:offset + page_size]), total


def apply_search(queryset: QuerySet, search: str, fields: Sequence[str]) -> QuerySet:
    """按多个字段做不区分大小写的包含匹配"""
    if not search or not fields:
        return queryset
    condition = Q()
    for field in fields:
        condition |= Q(**{f"{field}__icontains": search})
    return queryset.filter(condition)


def apply_datatable(
    queryset: QuerySet,
    request: DataTableRequest,
    search_fields: Sequence[str],
    column_map: Dict[str, str],
    default_ordering: Sequence[str] = ("-created_at",)
) -> Tuple[List[Any], int, int]:
    """
    按DataTables协议过滤、排序和截取查询集。

    Args:
        queryset: 基础查询集
        request: 数据表请求
        search_fields: 参与全局搜索的模型字段
        column_map: 列数据名到模型字段的映射，不在映射中的列不可排序
        default_ordering: 未指定排序时使用的排序

    Returns:
        当前页模型列表、记录总数和过滤后记录数
    """
    total = queryset.count()
    filtered_qs = apply_search(queryset, request.search, search_fields)
    filtered = filtered_qs.count() if request.search else total

    ordering = []
    for column, descending in request.ordering():
        field = column_map.get(column)
        if field:
            ordering.append(f"-{field}" if descending else field)
    filtered_qs = filtered_qs.order_by(*(ordering or default_ordering))

    if request.length is not None and request.length > 0:
        page = list(filtered_qs[request.start:request.start + request.length])
    else:
        page = list(filtered_qs[request.start:])
    return page, total, filtered
