"""
分类应用服务。
处理分类的命令和查询，维护分类树的层级和路径。
"""
from typing import List, Optional

from django.conf import settings
from loguru import logger

from core.application.pagination import DataTableRequest, DataTableResult, PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import ConflictException, DuplicateEntityException, EntityNotFoundException, Slug
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from catalog.application.commands import (
    ChangeCategoryStatusCommand,
    CreateCategoryCommand,
    DeleteCategoryCommand,
    UpdateCategoryCommand,
    UpdateCategoryParentCommand,
)
from catalog.application.dtos import CategoryDTO
from catalog.application.queries import ListCategoriesQuery
from catalog.domain import Category, CategoryRepository


class CategoryApplicationService(ApplicationService):
    """
    分类应用服务。
    """

    def __init__(
        self,
        category_repository: CategoryRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.category_repository = category_repository
        self.cache_timeout = settings.CATALOG_SETTINGS.get("CACHE_TIMEOUT", 3600)

    def _get_category(self, category_id) -> Category:
        category = self.category_repository.get_by_id(category_id)
        if category is None:
            raise EntityNotFoundException("Category", category_id)
        return category

    def _ensure_unique_slug(self, slug: str, exclude_id=None) -> None:
        normalized = Slug.normalize(slug)
        if self.category_repository.slug_exists(normalized, exclude_id):
            raise DuplicateEntityException("Category", "slug", normalized)

    def _move_descendants(self, category: Category, old_path: str, old_level: int) -> None:
        """父分类路径变化后，同步更新所有后代分类"""
        level_delta = category.level - old_level
        old = Category(path=old_path, level=old_level)
        for descendant in self.category_repository.get_descendants(old):
            descendant.rebase(old_path, category.path, level_delta)
            self.category_repository.save(descendant)

    # ==================== 命令处理方法 ====================

    @service_operation("创建分类")
    def create_category(self, command: CreateCategoryCommand) -> CategoryDTO:
        """
        创建分类。

        Args:
            command: 创建分类命令

        Returns:
            创建的分类DTO
        """
        with self.transaction_manager.start():
            self._ensure_unique_slug(command.slug)
            parent = self._get_category(command.parent_id) if command.parent_id else None
            category = Category.create(command.name, command.slug, command.description, parent)
            self.category_repository.save(category)
            logger.info(f"分类已创建: {category.id} {category.path}")
            return CategoryDTO.from_domain(category)

    @service_operation("更新分类")
    def update_category(self, command: UpdateCategoryCommand) -> CategoryDTO:
        with self.transaction_manager.start():
            category = self._get_category(command.id)
            self._ensure_unique_slug(command.slug, exclude_id=category.id)
            old_path, old_level = category.path, category.level
            path_changed = category.update(command.name, command.slug, command.description)
            self.category_repository.save(category)
            if path_changed:
                self._move_descendants(category, old_path, old_level)
            return CategoryDTO.from_domain(category)

    @service_operation("调整父分类")
    def update_parent(self, command: UpdateCategoryParentCommand) -> CategoryDTO:
        """
        把分类移动到新的父分类下，后代分类的层级和路径随之更新。

        Args:
            command: 调整父分类命令

        Returns:
            更新后的分类DTO

        Raises:
            EntityNotFoundException: 分类或父分类不存在
            BusinessRuleViolationException: 形成循环引用
        """
        with self.transaction_manager.start():
            category = self._get_category(command.id)
            parent = self._get_category(command.parent_id) if command.parent_id else None
            old_path, old_level = category.path, category.level
            category.set_parent(parent)
            if category.path != old_path:
                self.category_repository.save(category)
                self._move_descendants(category, old_path, old_level)
            return CategoryDTO.from_domain(category)

    @service_operation("变更分类状态")
    def change_status(self, command: ChangeCategoryStatusCommand) -> CategoryDTO:
        with self.transaction_manager.start():
            category = self._get_category(command.id)
            if command.is_active:
                category.activate()
            else:
                category.deactivate()
            if category.domain_events:
                self.category_repository.save(category)
            return CategoryDTO.from_domain(category)

    @service_operation("删除分类")
    def delete_category(self, command: DeleteCategoryCommand) -> None:
        """
        删除分类。存在子分类或关联商品的分类不能删除。

        Raises:
            ConflictException: 分类仍有子分类或商品
        """
        with self.transaction_manager.start():
            category = self._get_category(command.id)
            if self.category_repository.has_children(category.id):
                raise ConflictException("Category.HasChildren", "分类下存在子分类，无法删除")
            if self.category_repository.count_products(category.id) > 0:
                raise ConflictException("Category.HasProducts", "分类下存在商品，无法删除")
            category.mark_deleted()
            self.category_repository.delete(category)
            logger.info(f"分类已删除: {category.id}")

    # ==================== 查询处理方法 ====================

    @service_operation("获取分类")
    def get_category(self, category_id) -> CategoryDTO:
        dto = self._cached(
            f"category:{category_id}",
            lambda: self._load_dto(self.category_repository.get_by_id(category_id)),
            self.cache_timeout,
        )
        if dto is None:
            raise EntityNotFoundException("Category", category_id)
        return dto

    @service_operation("按别名获取分类")
    def get_category_by_slug(self, slug: str) -> CategoryDTO:
        dto = self._cached(
            f"categories:slug:{slug}",
            lambda: self._load_dto(self.category_repository.get_by_slug(slug)),
            self.cache_timeout,
        )
        if dto is None:
            raise EntityNotFoundException("Category", slug)
        return dto

    @staticmethod
    def _load_dto(category: Optional[Category]) -> Optional[CategoryDTO]:
        return CategoryDTO.from_domain(category) if category else None

    @service_operation("获取全部分类")
    def get_all_categories(self) -> List[CategoryDTO]:
        return self._cached(
            "categories:all",
            lambda: [CategoryDTO.from_domain(c) for c in self.category_repository.get_all()],
            self.cache_timeout,
        )

    @service_operation("获取根分类")
    def get_root_categories(self) -> List[CategoryDTO]:
        return self._cached(
            "categories:roots",
            lambda: [CategoryDTO.from_domain(c) for c in self.category_repository.get_roots()],
            self.cache_timeout,
        )

    @service_operation("获取子分类")
    def get_child_categories(self, parent_id) -> List[CategoryDTO]:
        self._get_category(parent_id)
        return self._cached(
            f"categories:children:{parent_id}",
            lambda: [CategoryDTO.from_domain(c) for c in self.category_repository.get_children(parent_id)],
            self.cache_timeout,
        )

    @service_operation("分页获取分类")
    def list_categories(self, query: ListCategoriesQuery) -> PaginatedResult:
        categories, total = self.category_repository.paginate(
            query.page, query.page_size, parent_id=query.parent_id, active_only=query.active_only
        )
        return PaginatedResult([CategoryDTO.from_domain(c) for c in categories], total, query.page, query.page_size)

    @service_operation("分类数据表查询")
    def get_datatable(self, request: DataTableRequest) -> DataTableResult:
        categories, total, filtered = self.category_repository.datatable(request)
        return DataTableResult(
            request.draw, total, filtered, [CategoryDTO.from_domain(c).to_dict() for c in categories]
        )
