"""
商品目录应用服务层包。
提供分类、属性、商品的应用服务、数据传输对象、命令和查询。
"""

# DTO
from catalog.application.dtos import (
    AttributeDTO,
    CategoryDTO,
    ProductDTO,
    ProductImageDTO,
    ProductVariantDTO,
    SearchIndexRebuildDTO,
)

# 命令
from catalog.application.commands import (
    AddProductVariantCommand,
    ChangeCategoryStatusCommand,
    ChangeProductStatusCommand,
    ChangeVariantStatusCommand,
    CreateAttributeCommand,
    CreateCategoryCommand,
    CreateProductCommand,
    DeleteAttributeCommand,
    DeleteCategoryCommand,
    DeleteProductCommand,
    DeleteProductVariantCommand,
    RebuildSearchIndexCommand,
    RemoveProductImageCommand,
    ReorderProductImagesCommand,
    SetDefaultProductImageCommand,
    UpdateAttributeCommand,
    UpdateCategoryCommand,
    UpdateCategoryParentCommand,
    UpdateProductCommand,
    UpdateProductVariantCommand,
    UpdateVariantStockCommand,
    UploadProductImageCommand,
)

# 查询
from catalog.application.queries import ListAttributesQuery, ListCategoriesQuery, ListProductsQuery, SearchProductsQuery

# 应用服务
from catalog.application.attribute_service import AttributeApplicationService
from catalog.application.category_service import CategoryApplicationService
from catalog.application.product_service import ProductApplicationService
from catalog.application.search_service import ProductSearchApplicationService

__all__ = [
    'AttributeDTO',
    'CategoryDTO',
    'ProductDTO',
    'ProductImageDTO',
    'ProductVariantDTO',
    'SearchIndexRebuildDTO',

    'AddProductVariantCommand',
    'ChangeCategoryStatusCommand',
    'ChangeProductStatusCommand',
    'ChangeVariantStatusCommand',
    'CreateAttributeCommand',
    'CreateCategoryCommand',
    'CreateProductCommand',
    'DeleteAttributeCommand',
    'DeleteCategoryCommand',
    'DeleteProductCommand',
    'DeleteProductVariantCommand',
    'RebuildSearchIndexCommand',
    'RemoveProductImageCommand',
    'ReorderProductImagesCommand',
    'SetDefaultProductImageCommand',
    'UpdateAttributeCommand',
    'UpdateCategoryCommand',
    'UpdateCategoryParentCommand',
    'UpdateProductCommand',
    'UpdateProductVariantCommand',
    'UpdateVariantStockCommand',
    'UploadProductImageCommand',

    'ListAttributesQuery',
    'ListCategoriesQuery',
    'ListProductsQuery',
    'SearchProductsQuery',

    'AttributeApplicationService',
    'CategoryApplicationService',
    'ProductApplicationService',
    'ProductSearchApplicationService',
]
