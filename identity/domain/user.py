"""
用户聚合根。
管理用户身份信息、角色、登录状态、邮箱验证、密码重置以及刷新令牌。
"""
from datetime import datetime, timedelta
import re
import secrets
from typing import Any, List, Optional
import uuid

from core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    Email,
    Entity,
    EntityNotFoundException,
    PhoneNumber,
    ValidationException,
    utc_now,
)
from identity.domain.events import (
    UserCreatedEvent,
    UserEmailChangedEvent,
    UserEmailVerifiedEvent,
    UserLockedOutEvent,
    UserPasswordChangedEvent,
    UserRoleChangedEvent,
    UserStatusChangedEvent,
    UserUpdatedEvent,
)
from identity.domain.value_objects import FullName

MAX_FAILED_LOGIN_ATTEMPTS = 5
EMAIL_VERIFICATION_LIFETIME = timedelta(days=1)
PASSWORD_RESET_LIFETIME = timedelta(hours=1)
REFRESH_TOKEN_LIFETIME = timedelta(days=7)

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 255


class UserRole:
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    MANAGER = "Manager"

    ALL = (CUSTOMER, ADMIN, MANAGER)


def validate_password(password: str) -> str:
    """
    校验密码强度：8到255个字符，至少包含大写字母、小写字母、数字和特殊字符各一个。
    密码不做首尾空白处理。

    Raises:
        ValidationException: 密码不满足要求
    """
    if not password or not password.strip():
        raise ValidationException("password", "密码不能为空")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationException("password", f"密码长度不能少于{PASSWORD_MIN_LENGTH}个字符")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationException("password", f"密码长度不能超过{PASSWORD_MAX_LENGTH}个字符")
    if not re.search(r"[A-Z]", password):
        raise ValidationException("password", "密码必须包含大写字母")
    if not re.search(r"[a-z]", password):
        raise ValidationException("password", "密码必须包含小写字母")
    if not re.search(r"\d", password):
        raise ValidationException("password", "密码必须包含数字")
    if not re.search(r"[^A-Za-z0-9]", password):
        raise ValidationException("password", "密码必须包含特殊字符")
    return password


class RefreshToken(Entity):
    """刷新令牌实体"""

    def __init__(
        self,
        id: Any = None,
        user_id: Any = None,
        token: str = "",
        expires_at: Optional[datetime] = None,
        issued_at: Optional[datetime] = None,
        is_revoked: bool = False,
        revoked_reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, created_at, updated_at)
        self.user_id = user_id
        self.token = token
        self.issued_at = issued_at or self.created_at
        self.expires_at = expires_at or self.issued_at + REFRESH_TOKEN_LIFETIME
        self.is_revoked = is_revoked
        self.revoked_reason = revoked_reason
        self.ip_address = ip_address
        self.user_agent = user_agent

    @property
    def is_expired(self) -> bool:
        return utc_now() >= self.expires_at

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired

    def revoke(self, reason: str) -> None:
        if self.is_revoked:
            return
        self.is_revoked = True
        self.revoked_reason = reason
        self.touch()


class User(AggregateRoot):
    """用户聚合根"""

    def __init__(
        self,
        id: Any = None,
        email: Optional[Email] = None,
        password_hash: str = "",
        full_name: Optional[FullName] = None,
        phone: Optional[PhoneNumber] = None,
        role: str = UserRole.CUSTOMER,
        is_active: bool = True,
        email_verified: bool = False,
        email_verification_token: Optional[str] = None,
        email_verification_expires: Optional[datetime] = None,
        password_reset_token: Optional[str] = None,
        password_reset_expires: Optional[datetime] = None,
        last_login: Optional[datetime] = None,
        failed_login_attempts: int = 0,
        last_failed_attempt: Optional[datetime] = None,
        refresh_tokens: Optional[List[RefreshToken]] = None,
        version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        super().__init__(id, version, created_at, updated_at)
        self.email = email
        self.password_hash = password_hash
        self.full_name = full_name
        self.phone = phone
        self.role = role
        self.is_active = is_active
        self.email_verified = email_verified
        self.email_verification_token = email_verification_token
        self.email_verification_expires = email_verification_expires
        self.password_reset_token = password_reset_token
        self.password_reset_expires = password_reset_expires
        self.last_login = last_login
        self.failed_login_attempts = failed_login_attempts
        self.last_failed_attempt = last_failed_attempt
        self._refresh_tokens: List[RefreshToken] = list(refresh_tokens or [])

    @classmethod
    def create(
        cls,
        email: str,
        password_hash: str,
        full_name: FullName,
        phone: Optional[str] = None,
        role: str = UserRole.CUSTOMER
    ) -> 'User':
        """
        创建用户。

        Args:
            email: 邮箱地址
            password_hash: 已哈希的密码
            full_name: 姓名
            phone: 电话号码，可选
            role: 用户角色

        Returns:
            新建的用户

        Raises:
            ValidationException: 邮箱、电话、密码哈希或角色无效
        """
        if not password_hash:
            raise ValidationException("password", "密码哈希不能为空")
        if role not in UserRole.ALL:
            raise ValidationException("role", f"无效的角色: {role}")
        user = cls(
            email=Email(email),
            password_hash=password_hash,
            full_name=full_name,
            phone=PhoneNumber(phone) if phone else None,
            role=role,
        )
        user.add_domain_event(UserCreatedEvent(user.id))
        return user

    @property
    def refresh_tokens(self) -> List[RefreshToken]:
        return list(self._refresh_tokens)

    @property
    def active_refresh_tokens(self) -> List[RefreshToken]:
        return [t for t in self._refresh_tokens if t.is_active]

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MANAGER)

    # ==================== 资料 ====================

    def update_personal_info(self, full_name: FullName, phone: Optional[str] = None) -> None:
        self.full_name = full_name
        self.phone = PhoneNumber(phone) if phone else None
        self.add_domain_event(UserUpdatedEvent(self.id))

    def update_email(self, email: str) -> None:
        """
        修改邮箱。新邮箱需要重新验证。
        """
        new_email = Email(email)
        if new_email == self.email:
            return
        self.email = new_email
        self.email_verified = False
        self.email_verification_token = None
        self.email_verification_expires = None
        self.add_domain_event(UserEmailChangedEvent(self.id, new_email.value))

    def update_password(self, password_hash: str) -> None:
        """修改密码，并吊销全部刷新令牌"""
        if not password_hash:
            raise ValidationException("password", "密码哈希不能为空")
        self.password_hash = password_hash
        self.revoke_all_refresh_tokens("密码已修改")
        self.add_domain_event(UserPasswordChangedEvent(self.id))

    def set_role(self, role: str) -> None:
        if role not in UserRole.ALL:
            raise ValidationException("role", f"无效的角色: {role}")
        if role == self.role:
            return
        self.role = role
        self.add_domain_event(UserRoleChangedEvent(self.id, role))

    # ==================== 登录状态 ====================

    def record_login_success(self) -> None:
        self.last_login = utc_now()
        self.failed_login_attempts = 0
        self.last_failed_attempt = None
        self.touch()

    def record_login_failure(self, max_attempts: int = MAX_FAILED_LOGIN_ATTEMPTS) -> bool:
        """
        记录一次登录失败。连续失败次数达到上限时停用账户。

        Args:
            max_attempts: 允许的最大连续失败次数

        Returns:
            本次失败后账户是否被锁定
        """
        self.failed_login_attempts += 1
        self.last_failed_attempt = utc_now()
        self.touch()
        if self.failed_login_attempts >= max_attempts and self.is_active:
            self.deactivate()
            self.add_domain_event(UserLockedOutEvent(self.id))
            return True
        return False

    def activate(self) -> None:
        """启用账户，同时清零登录失败次数"""
        self.failed_login_attempts = 0
        self.last_failed_attempt = None
        if self.is_active:
            return
        self.is_active = True
        self.add_domain_event(UserStatusChangedEvent(self.id, True))

    def deactivate(self) -> None:
        """停用账户，并吊销全部刷新令牌"""
        if not self.is_active:
            return
        self.is_active = False
        self.revoke_all_refresh_tokens("账户已停用")
        self.add_domain_event(UserStatusChangedEvent(self.id, False))

    # ==================== 邮箱验证与密码重置 ====================

    def generate_email_verification_token(self, lifetime: timedelta = EMAIL_VERIFICATION_LIFETIME) -> str:
        """
        生成邮箱验证令牌。

        Raises:
            BusinessRuleViolationException: 邮箱已验证
        """
        if self.email_verified:
            raise BusinessRuleViolationException("User.EmailAlreadyVerified", "邮箱已验证")
        self.email_verification_token = uuid.uuid4().hex
        self.email_verification_expires = utc_now() + lifetime
        self.touch()
        return self.email_verification_token

    def verify_email(self, token: Optional[str] = None) -> None:
        """
        验证邮箱。提供令牌时校验令牌是否匹配且未过期；已验证的邮箱重复验证不做任何事。

        Raises:
            BusinessRuleViolationException: 令牌无效或已过期
        """
        if self.email_verified:
            return
        if token is not None:
            if not self.email_verification_token or token != self.email_verification_token:
                raise BusinessRuleViolationException("User.InvalidVerificationToken", "验证令牌无效")
            if self.email_verification_expires and utc_now() > self.email_verification_expires:
                raise BusinessRuleViolationException("User.VerificationTokenExpired", "验证令牌已过期")
        self.email_verified = True
        self.email_verification_token = None
        self.email_verification_expires = None
        self.add_domain_event(UserEmailVerifiedEvent(self.id))

    def generate_password_reset_token(self, lifetime: timedelta = PASSWORD_RESET_LIFETIME) -> str:
        self.password_reset_token = secrets.token_urlsafe(32)
        self.password_reset_expires = utc_now() + lifetime
        self.touch()
        return self.password_reset_token

    def reset_password(self, token: str, password_hash: str) -> None:
        """
        使用重置令牌设置新密码。

        Raises:
            BusinessRuleViolationException: 令牌无效或已过期
        """
        if not self.password_reset_token or token != self.password_reset_token:
            raise BusinessRuleViolationException("User.InvalidResetToken", "密码重置令牌无效")
        if self.password_reset_expires and utc_now() > self.password_reset_expires:
            raise BusinessRuleViolationException("User.ResetTokenExpired", "密码重置令牌已过期")
        self.clear_password_reset_token()
        self.update_password(password_hash)

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None
        self.touch()

    # ==================== 刷新令牌 ====================

    def add_refresh_token(
        self,
        lifetime: timedelta = REFRESH_TOKEN_LIFETIME,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> RefreshToken:
        """
        签发新的刷新令牌。

        Raises:
            BusinessRuleViolationException: 账户已停用
        """
        if not self.is_active:
            raise BusinessRuleViolationException("User.AccountInactive", "账户已停用")
        now = utc_now()
        refresh_token = RefreshToken(
            user_id=self.id,
            token=secrets.token_urlsafe(64),
            issued_at=now,
            expires_at=now + lifetime,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:255] or None,
        )
        self._refresh_tokens.append(refresh_token)
        self.touch()
        return refresh_token

    def find_refresh_token(self, token: str) -> Optional[RefreshToken]:
        return next((t for t in self._refresh_tokens if t.token == token), None)

    def revoke_refresh_token(self, token: str, reason: str) -> RefreshToken:
        """
        吊销指定刷新令牌。

        Raises:
            EntityNotFoundException: 令牌不属于该用户
        """
        refresh_token = self.find_refresh_token(token)
        if refresh_token is None:
            raise EntityNotFoundException("RefreshToken", "token")
        refresh_token.revoke(reason)
        self.touch()
        return refresh_token

    def revoke_all_refresh_tokens(self, reason: str) -> int:
        count = 0
        for refresh_token in self._refresh_tokens:
            if not refresh_token.is_revoked:
                refresh_token.revoke(reason)
                count += 1
        if count:
            self.touch()
        return count
