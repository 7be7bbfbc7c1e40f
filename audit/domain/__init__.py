"""
审计领域模型。
"""
from audit.domain.audit_log import AuditAction, AuditLog
from audit.domain.repositories import AuditLogRepository

__all__ = ['AuditAction', 'AuditLog', 'AuditLogRepository']
