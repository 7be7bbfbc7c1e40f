"""
身份基础设施层工厂。
负责创建用户仓储，并组装认证和用户应用服务。
"""
from typing import Optional

from core.infrastructure.cache import CacheService, create_cache_service
from core.infrastructure.email import DjangoEmailService, EmailService
from core.infrastructure.transaction import DjangoTransactionManager, TransactionManager
from identity.application import AuthApplicationService, UserApplicationService
from identity.infrastructure.repositories import DjangoUserRepository
from identity.infrastructure.security import PasswordService, TokenService


class IdentityInfrastructureFactory:
    """
    身份基础设施层工厂类。
    """

    def __init__(
        self,
        cache_service: Optional[CacheService] = None,
        transaction_manager: Optional[TransactionManager] = None,
        email_service: Optional[EmailService] = None
    ):
        self.cache_service = cache_service or create_cache_service()
        self.transaction_manager = transaction_manager or DjangoTransactionManager()
        self.email_service = email_service or DjangoEmailService()
        self._user_repository = None

    def create_user_repository(self) -> DjangoUserRepository:
        if not self._user_repository:
            self._user_repository = DjangoUserRepository()
        return self._user_repository

    def create_auth_service(self) -> AuthApplicationService:
        return AuthApplicationService(
            user_repository=self.create_user_repository(),
            password_service=PasswordService(),
            token_service=TokenService(),
            email_service=self.email_service,
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )

    def create_user_service(self) -> UserApplicationService:
        return UserApplicationService(
            user_repository=self.create_user_repository(),
            transaction_manager=self.transaction_manager,
            cache_service=self.cache_service,
        )
