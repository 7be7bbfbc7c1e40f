# 引用基础设施层的模型
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
