"""
分类聚合根。
分类构成一棵树，每个分类记录自身层级(level)和物化路径(path)。
"""
from datetime import datetime
from typing import Any, Optional

from core.domain import AggregateRoot, BusinessRuleViolationException, Slug, ValidationException
from catalog.domain.events import (
    CategoryCreatedEvent,
    CategoryDeletedEvent,
    CategoryHierarchyChangedEvent,
    CategoryStatusChangedEvent,
    CategoryUpdatedEvent,
)

NAME_MAX_LENGTH = 100


def _validate_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationException("name", "分类名称不能为空")
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationException("name", f"分类名称不能超过{NAME_MAX_LENGTH}个字符")
    return name


class Category(AggregateRoot):
    """分类聚合根"""

    def __init__(
        self,
        id: Any = None,
        name: str = "",
        slug: Optional[Slug] = None,
        description: Optional[str] = None,
        parent_id: Any = None,
        level: int = 0,
        path: str = "",
        is_active: bool = True,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.name = name
        self.slug = slug
        self.description = description
        self.parent_id = parent_id
        self.level = level
        self.path = path
        self.is_active = is_active

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        description: Optional[str] = None,
        parent: Optional['Category'] = None
    ) -> 'Category':
        """
        创建分类。

        根分类的层级为0，路径为 /slug；子分类的层级为父分类层级加一，路径为父路径/slug。

        Args:
            name: 分类名称
            slug: 分类别名，会被规范化
            description: 分类描述
            parent: 父分类

        Returns:
            新建的分类

        Raises:
            ValidationException: 名称或别名无效
        """
        category = cls(name=_validate_name(name), slug=Slug(slug), description=description)
        category._place_under(parent)
        category.add_domain_event(CategoryCreatedEvent(category.id))
        return category

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def _place_under(self, parent: Optional['Category']) -> None:
        if parent is None:
            self.parent_id = None
            self.level = 0
            self.path = f"/{self.slug.value}"
        else:
            self.parent_id = parent.id
            self.level = parent.level + 1
            self.path = f"{parent.path}/{self.slug.value}"

    def is_ancestor_of(self, other: 'Category') -> bool:
        """判断当前分类是否为另一分类的祖先"""
        return other.path.startswith(self.path + "/")

    def update(self, name: str, slug: str, description: Optional[str] = None) -> bool:
        """
        更新分类基本信息。
        别名变化时重新计算路径。

        Returns:
            路径是否发生了变化
        """
        self.name = _validate_name(name)
        new_slug = Slug(slug)
        old_path = self.path
        self.description = description
        if new_slug != self.slug:
            self.slug = new_slug
            parent_path = self.path.rsplit("/", 1)[0]
            self.path = f"{parent_path}/{new_slug.value}"
        self.add_domain_event(CategoryUpdatedEvent(self.id))
        return old_path != self.path

    def set_parent(self, parent: Optional['Category']) -> None:
        """
        移动分类到新的父分类下。

        Raises:
            BusinessRuleViolationException: 父分类是自身或自身的后代
        """
        if parent is not None:
            if parent.id == self.id:
                raise BusinessRuleViolationException("Category.CircularReference", "分类不能作为自己的父分类")
            if self.is_ancestor_of(parent):
                raise BusinessRuleViolationException("Category.CircularReference", "分类不能移动到自己的子分类下")

        old_parent_id = self.parent_id
        new_parent_id = parent.id if parent else None
        if old_parent_id == new_parent_id:
            return
        self._place_under(parent)
        self.add_domain_event(CategoryHierarchyChangedEvent(self.id, old_parent_id, new_parent_id))

    def rebase(self, old_prefix: str, new_prefix: str, level_delta: int) -> None:
        """
        祖先分类路径变化后更新后代分类的路径和层级。

        Args:
            old_prefix: 祖先原路径
            new_prefix: 祖先新路径
            level_delta: 层级变化量
        """
        self.path = new_prefix + self.path[len(old_prefix):]
        self.level += level_delta
        self.add_domain_event(CategoryUpdatedEvent(self.id))

    def activate(self) -> None:
        if self.is_active:
            return
        self.is_active = True
        self.add_domain_event(CategoryStatusChangedEvent(self.id, True))

    def deactivate(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        self.add_domain_event(CategoryStatusChangedEvent(self.id, False))

    def mark_deleted(self) -> None:
        self.add_domain_event(CategoryDeletedEvent(self.id))
