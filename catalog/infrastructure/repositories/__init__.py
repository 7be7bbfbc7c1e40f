from catalog.infrastructure.repositories.django_attribute_repository import DjangoAttributeRepository
from catalog.infrastructure.repositories.django_category_repository import DjangoCategoryRepository
from catalog.infrastructure.repositories.django_product_repository import DjangoProductRepository

__all__ = [
    'DjangoAttributeRepository',
    'DjangoCategoryRepository',
    'DjangoProductRepository',
]
