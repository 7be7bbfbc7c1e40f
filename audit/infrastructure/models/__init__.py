from audit.infrastructure.models.audit_models import AuditLogModel

__all__ = ['AuditLogModel']
