"""
属性应用服务。
"""
from typing import List, Optional

from django.conf import settings

from core.application.pagination import DataTableRequest, DataTableResult, PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import DuplicateEntityException, EntityNotFoundException
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from catalog.application.commands import CreateAttributeCommand, DeleteAttributeCommand, UpdateAttributeCommand
from catalog.application.dtos import AttributeDTO
from catalog.application.queries import ListAttributesQuery
from catalog.domain import Attribute, AttributeRepository


class AttributeApplicationService(ApplicationService):
    """属性应用服务"""

    def __init__(
        self,
        attribute_repository: AttributeRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.attribute_repository = attribute_repository
        self.cache_timeout = settings.CATALOG_SETTINGS.get("CACHE_TIMEOUT", 3600)

    def _get_attribute(self, attribute_id) -> Attribute:
        attribute = self.attribute_repository.get_by_id(attribute_id)
        if attribute is None:
            raise EntityNotFoundException("Attribute", attribute_id)
        return attribute

    @service_operation("创建属性")
    def create_attribute(self, command: CreateAttributeCommand) -> AttributeDTO:
        with self.transaction_manager.start():
            if self.attribute_repository.name_exists(command.name.strip()):
                raise DuplicateEntityException("Attribute", "name", command.name.strip())
            attribute = Attribute.create(
                command.name,
                command.display_name,
                command.type,
                command.configuration,
                command.filterable,
                command.searchable,
                command.is_variant,
            )
            self.attribute_repository.save(attribute)
            return AttributeDTO.from_domain(attribute)

    @service_operation("更新属性")
    def update_attribute(self, command: UpdateAttributeCommand) -> AttributeDTO:
        with self.transaction_manager.start():
            attribute = self._get_attribute(command.id)
            attribute.update(
                command.display_name,
                command.configuration,
                command.filterable,
                command.searchable,
                command.is_variant,
            )
            self.attribute_repository.save(attribute)
            return AttributeDTO.from_domain(attribute)

    @service_operation("删除属性")
    def delete_attribute(self, command: DeleteAttributeCommand) -> None:
        with self.transaction_manager.start():
            attribute = self._get_attribute(command.id)
            attribute.mark_deleted()
            self.attribute_repository.delete(attribute)

    @service_operation("获取属性")
    def get_attribute(self, attribute_id) -> AttributeDTO:
        def load():
            attribute = self.attribute_repository.get_by_id(attribute_id)
            return AttributeDTO.from_domain(attribute) if attribute else None

        dto = self._cached(f"attribute:{attribute_id}", load, self.cache_timeout)
        if dto is None:
            raise EntityNotFoundException("Attribute", attribute_id)
        return dto

    @service_operation("按名称获取属性")
    def get_attribute_by_name(self, name: str) -> AttributeDTO:
        attribute = self.attribute_repository.get_by_name(name)
        if attribute is None:
            raise EntityNotFoundException("Attribute", name)
        return AttributeDTO.from_domain(attribute)

    @service_operation("获取全部属性")
    def get_all_attributes(self) -> List[AttributeDTO]:
        return self._cached(
            "attributes:all",
            lambda: [AttributeDTO.from_domain(a) for a in self.attribute_repository.get_all()],
            self.cache_timeout,
        )

    @service_operation("获取变体属性")
    def get_variant_attributes(self) -> List[AttributeDTO]:
        return self._cached(
            "attributes:variant",
            lambda: [AttributeDTO.from_domain(a) for a in self.attribute_repository.get_variant_attributes()],
            self.cache_timeout,
        )

    @service_operation("分页获取属性")
    def list_attributes(self, query: ListAttributesQuery) -> PaginatedResult:
        attributes, total = self.attribute_repository.paginate(
            query.page, query.page_size, is_variant=query.is_variant
        )
        return PaginatedResult([AttributeDTO.from_domain(a) for a in attributes], total, query.page, query.page_size)

    @service_operation("属性数据表查询")
    def get_datatable(self, request: DataTableRequest) -> DataTableResult:
        attributes, total, filtered = self.attribute_repository.datatable(request)
        return DataTableResult(
            request.draw, total, filtered, [AttributeDTO.from_domain(a).to_dict() for a in attributes]
        )
