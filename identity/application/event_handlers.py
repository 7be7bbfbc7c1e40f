"""
身份领域事件处理器。
使用户缓存失效，并在账户锁定、密码变更和状态变更时通知用户。
"""
from loguru import logger

from core.domain import DomainEvents
from core.infrastructure.cache import create_cache_service
from core.infrastructure.email import DjangoEmailService
from identity.domain.events import (
    UserEvent,
    UserLockedOutEvent,
    UserPasswordChangedEvent,
    UserStatusChangedEvent,
)


def _load_user(user_id):
    from identity.infrastructure.repositories import DjangoUserRepository
    return DjangoUserRepository().get_by_id(user_id)


def invalidate_user_cache(event: UserEvent) -> None:
    cache = create_cache_service()
    cache.delete(f"user:{event.user_id}")
    cache.delete_pattern("users:*")
    logger.debug(f"用户缓存已失效: {event.user_id}")


def notify_locked_out(event: UserLockedOutEvent) -> None:
    user = _load_user(event.user_id)
    if user is None:
        return
    DjangoEmailService().send_email(
        user.email.value,
        "账户已被锁定",
        "由于连续多次登录失败，您的账户已被锁定。请联系客服或通过重置密码恢复账户。",
    )


def notify_password_changed(event: UserPasswordChangedEvent) -> None:
    user = _load_user(event.user_id)
    if user is None:
        return
    DjangoEmailService().send_email(
        user.email.value,
        "密码已修改",
        "您的账户密码已修改，所有设备需要重新登录。如果不是您本人操作，请立即联系客服。",
    )


def notify_status_changed(event: UserStatusChangedEvent) -> None:
    user = _load_user(event.user_id)
    if user is None:
        return
    status = "启用" if event.is_active else "停用"
    DjangoEmailService().send_email(user.email.value, f"账户已{status}", f"您的账户已被{status}。")


def register_event_handlers() -> None:
    """注册身份上下文的事件处理器，由IdentityConfig.ready()调用"""
    DomainEvents.register(UserEvent, invalidate_user_cache)
    DomainEvents.register(UserLockedOutEvent, notify_locked_out)
    DomainEvents.register(UserPasswordChangedEvent, notify_password_changed)
    DomainEvents.register(UserStatusChangedEvent, notify_status_changed)
