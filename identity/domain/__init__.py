"""
身份领域模型包。
包含用户聚合根、刷新令牌、姓名值对象、领域事件和仓储接口。
"""
from identity.domain.value_objects import FullName
from identity.domain.user import RefreshToken, User, UserRole, validate_password
from identity.domain.events import (
    UserEvent,
    UserCreatedEvent,
    UserUpdatedEvent,
    UserEmailChangedEvent,
    UserPasswordChangedEvent,
    UserRoleChangedEvent,
    UserStatusChangedEvent,
    UserLockedOutEvent,
    UserEmailVerifiedEvent,
)
from identity.domain.repositories import UserRepository

__all__ = [
    'FullName',
    'RefreshToken',
    'User',
    'UserRole',
    'validate_password',
    'UserEvent',
    'UserCreatedEvent',
    'UserUpdatedEvent',
    'UserEmailChangedEvent',
    'UserPasswordChangedEvent',
    'UserRoleChangedEvent',
    'UserStatusChangedEvent',
    'UserLockedOutEvent',
    'UserEmailVerifiedEvent',
    'UserRepository',
]
