"""
身份领域事件。
"""
from typing import Any

from core.domain.events import DomainEvent


class UserEvent(DomainEvent):
    entity_type = "User"
    entity_id_field = "user_id"

    def __init__(self, user_id: Any):
        super().__init__()
        self.user_id = user_id


class UserCreatedEvent(UserEvent):
    """用户注册或被创建"""


class UserUpdatedEvent(UserEvent):
    """用户资料更新"""


class UserEmailChangedEvent(UserEvent):
    def __init__(self, user_id: Any, email: str):
        super().__init__(user_id)
        self.email = email


class UserPasswordChangedEvent(UserEvent):
    """用户密码变更"""


class UserRoleChangedEvent(UserEvent):
    def __init__(self, user_id: Any, role: str):
        super().__init__(user_id)
        self.role = role


class UserStatusChangedEvent(UserEvent):
    def __init__(self, user_id: Any, is_active: bool):
        super().__init__(user_id)
        self.is_active = is_active


class UserLockedOutEvent(UserEvent):
    """连续登录失败次数达到上限，账户被锁定"""


class UserEmailVerifiedEvent(UserEvent):
    """用户邮箱验证完成"""
