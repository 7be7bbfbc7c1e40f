from identity.infrastructure.repositories.django_user_repository import DjangoUserRepository

__all__ = [
    'DjangoUserRepository',
]
