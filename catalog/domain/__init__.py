"""
商品目录领域模型包。
包含分类、属性、商品聚合根及其领域事件和仓储接口。
"""
from catalog.domain.attribute import Attribute, AttributeType
from catalog.domain.category import Category
from catalog.domain.product import ImageCollection, Product, ProductImage, ProductVariant
from catalog.domain.events import (
    CategoryCreatedEvent,
    CategoryUpdatedEvent,
    CategoryDeletedEvent,
    CategoryStatusChangedEvent,
    CategoryHierarchyChangedEvent,
    AttributeCreatedEvent,
    AttributeUpdatedEvent,
    AttributeDeletedEvent,
    ProductEvent,
    ProductCreatedEvent,
    ProductUpdatedEvent,
    ProductDeletedEvent,
    ProductStatusChangedEvent,
    ProductCategoryAddedEvent,
    ProductCategoryRemovedEvent,
    ProductImageAddedEvent,
    ProductImageRemovedEvent,
    ProductVariantEvent,
    ProductVariantAddedEvent,
    ProductVariantUpdatedEvent,
    ProductVariantDeletedEvent,
    ProductVariantStockChangedEvent,
)
from catalog.domain.repositories import AttributeRepository, CategoryRepository, ProductRepository, ProductSearchService
from catalog.domain.search import SEARCH_SORT_OPTIONS, SearchCriteria, SearchFacets, SearchResult

__all__ = [
    'Attribute',
    'AttributeType',
    'Category',
    'ImageCollection',
    'Product',
    'ProductImage',
    'ProductVariant',

    'CategoryCreatedEvent',
    'CategoryUpdatedEvent',
    'CategoryDeletedEvent',
    'CategoryStatusChangedEvent',
    'CategoryHierarchyChangedEvent',
    'AttributeCreatedEvent',
    'AttributeUpdatedEvent',
    'AttributeDeletedEvent',
    'ProductEvent',
    'ProductCreatedEvent',
    'ProductUpdatedEvent',
    'ProductDeletedEvent',
    'ProductStatusChangedEvent',
    'ProductCategoryAddedEvent',
    'ProductCategoryRemovedEvent',
    'ProductImageAddedEvent',
    'ProductImageRemovedEvent',
    'ProductVariantEvent',
    'ProductVariantAddedEvent',
    'ProductVariantUpdatedEvent',
    'ProductVariantDeletedEvent',
    'ProductVariantStockChangedEvent',

    'AttributeRepository',
    'CategoryRepository',
    'ProductRepository',
    'ProductSearchService',

    'SEARCH_SORT_OPTIONS',
    'SearchCriteria',
    'SearchFacets',
    'SearchResult',
]
