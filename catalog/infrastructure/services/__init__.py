from catalog.infrastructure.services.django_search_service import DjangoProductSearchService

__all__ = [
    'DjangoProductSearchService',
]
