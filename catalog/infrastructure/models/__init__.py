from catalog.infrastructure.models.catalog_models import (
    AttributeModel,
    CategoryModel,
    ProductAttributeModel,
    ProductImageModel,
    ProductModel,
    ProductSearchDocumentModel,
    ProductSearchFacetModel,
    ProductVariantModel,
    VariantAttributeModel,
)

__all__ = [
    'AttributeModel',
    'CategoryModel',
    'ProductAttributeModel',
    'ProductImageModel',
    'ProductModel',
    'ProductSearchDocumentModel',
    'ProductSearchFacetModel',
    'ProductVariantModel',
    'VariantAttributeModel',
]
