"""
审计基础设施层工厂。
"""
from typing import Optional

from django.conf import settings

from audit.application import AuditApplicationService
from audit.infrastructure.repositories import DjangoAuditLogRepository
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager


class AuditInfrastructureFactory:

    def __init__(self, transaction_manager: Optional[TransactionManager] = None):
        self.transaction_manager = transaction_manager or DjangoTransactionManager()

    def create_audit_service(self) -> AuditApplicationService:
        return AuditApplicationService(
            audit_log_repository=DjangoAuditLogRepository(),
            transaction_manager=self.transaction_manager,
            app_version=getattr(settings, "APP_VERSION", None),
        )
