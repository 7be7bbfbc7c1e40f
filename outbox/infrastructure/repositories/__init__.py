from outbox.infrastructure.repositories.django_outbox_repository import DjangoOutboxMessageRepository

__all__ = ['DjangoOutboxMessageRepository']
