from audit.infrastructure.repositories.django_audit_log_repository import DjangoAuditLogRepository

__all__ = ['DjangoAuditLogRepository']
