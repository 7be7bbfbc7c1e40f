"""
用户应用服务。
处理个人资料以及管理员对用户的查询和管理。
"""
from typing import Optional

from django.conf import settings

from core.application.pagination import DataTableRequest, DataTableResult, PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import BusinessRuleViolationException, DuplicateEntityException, Email, EntityNotFoundException
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from identity.application.commands import (
    ChangeUserRoleCommand,
    ChangeUserStatusCommand,
    UpdateProfileCommand,
    UpdateUserCommand,
)
from identity.application.dtos import UserDTO
from identity.domain import FullName, User, UserRepository


class UserApplicationService(ApplicationService):
    """
    用户应用服务。
    """

    def __init__(
        self,
        user_repository: UserRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.user_repository = user_repository
        self.cache_timeout = getattr(settings, "IDENTITY_SETTINGS", {}).get("CACHE_TIMEOUT", 900)

    def _get_user(self, user_id) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundException("User", user_id)
        return user

    def _get_user_dto(self, user_id) -> UserDTO:
        dto = self._cached(
            f"user:{user_id}",
            lambda: self._load_dto(self.user_repository.get_by_id(user_id)),
            self.cache_timeout,
        )
        if dto is None:
            raise EntityNotFoundException("User", user_id)
        return dto

    @staticmethod
    def _load_dto(user: Optional[User]) -> Optional[UserDTO]:
        return UserDTO.from_domain(user) if user else None

    @service_operation("获取用户")
    def get_user(self, user_id) -> UserDTO:
        return self._get_user_dto(user_id)

    @service_operation("获取个人资料")
    def get_profile(self, user_id) -> UserDTO:
        return self._get_user_dto(user_id)

    @service_operation("更新个人资料")
    def update_profile(self, command: UpdateProfileCommand) -> UserDTO:
        with self.transaction_manager.start():
            user = self._get_user(command.user_id)
            user.update_personal_info(
                FullName(command.first_name, command.last_name, command.middle_name), command.phone
            )
            self.user_repository.save(user)
            return UserDTO.from_domain(user)

    @service_operation("更新用户")
    def update_user(self, command: UpdateUserCommand) -> UserDTO:
        """
        管理员更新用户资料，可同时修改邮箱。

        Raises:
            EntityNotFoundException: 用户不存在
            DuplicateEntityException: 新邮箱已被占用
        """
        with self.transaction_manager.start():
            user = self._get_user(command.id)
            user.update_personal_info(
                FullName(command.first_name, command.last_name, command.middle_name), command.phone
            )
            if command.email:
                email = Email(command.email)
                if self.user_repository.email_exists(email.value, exclude_id=user.id):
                    raise DuplicateEntityException("User", "email", email.value)
                user.update_email(email.value)
            self.user_repository.save(user)
            return UserDTO.from_domain(user)

    @service_operation("变更用户角色")
    def change_role(self, command: ChangeUserRoleCommand) -> UserDTO:
        with self.transaction_manager.start():
            user = self._get_user(command.id)
            user.set_role(command.role)
            if user.domain_events:
                self.user_repository.save(user)
            return UserDTO.from_domain(user)

    @service_operation("变更用户状态")
    def change_status(self, command: ChangeUserStatusCommand) -> UserDTO:
        """
        启用或停用用户。用户不能停用自己。

        Raises:
            EntityNotFoundException: 用户不存在
            BusinessRuleViolationException: 停用自己
        """
        with self.transaction_manager.start():
            user = self._get_user(command.id)
            if not command.is_active and command.current_user_id is not None \
                    and str(command.current_user_id) == str(user.id):
                raise BusinessRuleViolationException("User.CannotDeactivateSelf", "不能停用自己的账户")
            if command.is_active:
                user.activate()
            else:
                user.deactivate()
            self.user_repository.save(user)
            return UserDTO.from_domain(user)

    @service_operation("分页获取用户")
    def list_users(self, page: int = 1, page_size: int = 20, role: Optional[str] = None,
                   is_active: Optional[bool] = None) -> PaginatedResult:
        users, total = self.user_repository.paginate(page, page_size, role=role, is_active=is_active)
        return PaginatedResult([UserDTO.from_domain(u) for u in users], total, page, page_size)

    @service_operation("用户数据表查询")
    def get_datatable(self, request: DataTableRequest) -> DataTableResult:
        users, total, filtered = self.user_repository.datatable(request)
        return DataTableResult(request.draw, total, filtered, [UserDTO.from_domain(u).to_dict() for u in users])
