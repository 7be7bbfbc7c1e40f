"""
审计应用服务层。
"""
from audit.application.audit_service import AuditApplicationService
from audit.application.dtos import AuditLogDTO

__all__ = ['AuditApplicationService', 'AuditLogDTO']
