from outbox.infrastructure.models.outbox_models import OutboxMessageModel

__all__ = ['OutboxMessageModel']
