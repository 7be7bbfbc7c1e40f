"""
认证应用服务。
处理注册、登录、令牌刷新、登出、邮箱验证和密码相关的命令。
"""
from datetime import timedelta
from typing import Optional

from django.conf import settings
from loguru import logger

from core.application.services import ApplicationService, service_operation
from core.domain import (
    AuthenticationException,
    BusinessRuleViolationException,
    DuplicateEntityException,
    Email,
    EntityNotFoundException,
    ValidationException,
)
from core.infrastructure.cache import CacheService
from core.infrastructure.email import EmailService
from core.infrastructure.transaction import TransactionManager
from identity.application.commands import (
    ChangePasswordCommand,
    ForgotPasswordCommand,
    LoginCommand,
    LogoutCommand,
    RefreshTokenCommand,
    RegisterCommand,
    ResendVerificationCommand,
    ResetPasswordCommand,
    VerifyEmailCommand,
)
from identity.application.dtos import AuthTokenDTO
from identity.domain import FullName, User, UserRepository, validate_password
from identity.infrastructure.security import PasswordService, TokenService

INVALID_CREDENTIALS_MESSAGE = "邮箱或密码错误"


class AuthApplicationService(ApplicationService):
    """
    认证应用服务。
    """

    def __init__(
        self,
        user_repository: UserRepository,
        password_service: PasswordService,
        token_service: TokenService,
        email_service: EmailService,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.user_repository = user_repository
        self.password_service = password_service
        self.token_service = token_service
        self.email_service = email_service

        options = getattr(settings, "IDENTITY_SETTINGS", {})
        self.max_failed_attempts = options.get("MAX_FAILED_LOGIN_ATTEMPTS", 5)
        self.verification_lifetime = timedelta(hours=options.get("EMAIL_VERIFICATION_HOURS", 24))
        self.reset_lifetime = timedelta(hours=options.get("PASSWORD_RESET_HOURS", 1))
        self.frontend_url = options.get("FRONTEND_URL", "").rstrip("/")

    def _issue_tokens(self, user: User, ip_address: Optional[str], user_agent: Optional[str]) -> AuthTokenDTO:
        refresh_token = user.add_refresh_token(
            lifetime=self.token_service.refresh_token_lifetime, ip_address=ip_address, user_agent=user_agent
        )
        self.user_repository.save(user)
        return AuthTokenDTO(
            user,
            access_token=self.token_service.generate_access_token(user),
            refresh_token=refresh_token.token,
            expires_in=self.token_service.access_token_expires_in,
        )

    @staticmethod
    def _ensure_passwords_match(password: str, confirm_password: str) -> None:
        if password != confirm_password:
            raise ValidationException("confirm_password", "两次输入的密码不一致")

    # ==================== 邮件 ====================

    def _send_verification_email(self, email: str, token: str) -> None:
        link = f"{self.frontend_url}/verify-email?token={token}"
        self.email_service.send_email(
            email,
            "请验证您的邮箱",
            f"感谢注册Shopilent。请访问以下链接验证邮箱，链接24小时内有效:\n{link}",
        )

    def _send_password_reset_email(self, email: str, token: str) -> None:
        link = f"{self.frontend_url}/reset-password?token={token}"
        self.email_service.send_email(
            email,
            "重置密码",
            f"我们收到了重置密码的请求。请访问以下链接设置新密码，链接1小时内有效:\n{link}\n"
            f"如果不是您本人操作，请忽略此邮件。",
        )

    # ==================== 命令处理方法 ====================

    @service_operation("注册")
    def register(self, command: RegisterCommand) -> AuthTokenDTO:
        """
        注册新用户并发送验证邮件。

        Args:
            command: 注册命令

        Returns:
            包含访问令牌和刷新令牌的认证结果

        Raises:
            ValidationException: 邮箱、姓名或密码无效
            DuplicateEntityException: 邮箱已被注册
        """
        email = Email(command.email)
        validate_password(command.password)
        full_name = FullName(command.first_name, command.last_name)

        with self.transaction_manager.start():
            if self.user_repository.email_exists(email.value):
                raise DuplicateEntityException("User", "email", email.value)
            user = User.create(
                email.value, self.password_service.hash_password(command.password), full_name, command.phone
            )
            token = user.generate_email_verification_token(self.verification_lifetime)
            result = self._issue_tokens(user, command.ip_address, command.user_agent)
            self.transaction_manager.on_commit(lambda: self._send_verification_email(email.value, token))

        logger.info(f"用户已注册: {user.id} {email.value}")
        return result

    @service_operation("登录")
    def login(self, command: LoginCommand) -> AuthTokenDTO:
        """
        使用邮箱和密码登录。

        密码错误时累计失败次数，连续失败达到上限后账户被停用。
        失败次数在事务中保存后再返回认证失败。

        Raises:
            ValidationException: 邮箱格式无效
            AuthenticationException: 用户不存在、密码错误或账户已停用
        """
        email = Email(command.email)
        locked = None

        with self.transaction_manager.start():
            user = self.user_repository.get_by_email(email.value)
            if user is None:
                raise AuthenticationException(INVALID_CREDENTIALS_MESSAGE, "User.InvalidCredentials")
            if not user.is_active:
                raise AuthenticationException("账户已停用", "User.AccountInactive")

            if self.password_service.verify_password(command.password, user.password_hash):
                user.record_login_success()
                result = self._issue_tokens(user, command.ip_address, command.user_agent)
            else:
                locked = user.record_login_failure(self.max_failed_attempts)
                self.user_repository.save(user)

        if locked is not None:
            if locked:
                logger.warning(f"用户因连续登录失败被锁定: {user.id}")
                raise AuthenticationException("登录失败次数过多，账户已被锁定", "User.AccountLocked")
            raise AuthenticationException(INVALID_CREDENTIALS_MESSAGE, "User.InvalidCredentials")

        logger.info(f"用户已登录: {user.id}")
        return result

    @service_operation("刷新令牌")
    def refresh_token(self, command: RefreshTokenCommand) -> AuthTokenDTO:
        """
        使用刷新令牌换取新的访问令牌和刷新令牌，旧刷新令牌随即吊销。

        Raises:
            AuthenticationException: 刷新令牌不存在、已吊销、已过期或账户已停用
        """
        with self.transaction_manager.start():
            user = self.user_repository.get_by_refresh_token(command.refresh_token)
            if user is None:
                raise AuthenticationException("刷新令牌无效", "RefreshToken.Invalid")
            current = user.find_refresh_token(command.refresh_token)
            if current.is_revoked:
                raise AuthenticationException("刷新令牌已被吊销", "RefreshToken.Revoked")
            if current.is_expired:
                raise AuthenticationException("刷新令牌已过期", "RefreshToken.Expired")
            if not user.is_active:
                raise AuthenticationException("账户已停用", "User.AccountInactive")

            user.revoke_refresh_token(command.refresh_token, "已被新令牌替换")
            return self._issue_tokens(user, command.ip_address, command.user_agent)

    @service_operation("登出")
    def logout(self, command: LogoutCommand) -> None:
        """
        吊销刷新令牌。重复登出同一令牌视为成功。

        Raises:
            AuthenticationException: 刷新令牌不存在
        """
        with self.transaction_manager.start():
            user = self.user_repository.get_by_refresh_token(command.refresh_token)
            if user is None:
                raise AuthenticationException("刷新令牌无效", "RefreshToken.Invalid")
            reason = (command.reason or "").strip() or "用户登出"
            user.revoke_refresh_token(command.refresh_token, reason)
            self.user_repository.save(user)

    @service_operation("验证邮箱")
    def verify_email(self, command: VerifyEmailCommand) -> None:
        """
        Raises:
            BusinessRuleViolationException: 令牌无效、已使用或已过期
        """
        token = (command.token or "").strip()
        with self.transaction_manager.start():
            user = self.user_repository.get_by_verification_token(token)
            if user is None:
                raise BusinessRuleViolationException("User.InvalidVerificationToken", "验证令牌无效")
            user.verify_email(token)
            self.user_repository.save(user)
        logger.info(f"用户邮箱已验证: {user.id}")

    @service_operation("重发验证邮件")
    def resend_verification(self, command: ResendVerificationCommand) -> None:
        """
        重新生成验证令牌并发送邮件。邮箱已验证时不做任何事。

        Raises:
            EntityNotFoundException: 邮箱未注册
        """
        email = Email(command.email)
        with self.transaction_manager.start():
            user = self.user_repository.get_by_email(email.value)
            if user is None:
                raise EntityNotFoundException("User", email.value)
            if user.email_verified:
                return None
            token = user.generate_email_verification_token(self.verification_lifetime)
            self.user_repository.save(user)
            self.transaction_manager.on_commit(lambda: self._send_verification_email(email.value, token))

    @service_operation("忘记密码")
    def forgot_password(self, command: ForgotPasswordCommand) -> None:
        """
        生成密码重置令牌并发送邮件。
        邮箱未注册或账户已停用时同样返回成功，不暴露账户是否存在。
        """
        email = Email(command.email)
        with self.transaction_manager.start():
            user = self.user_repository.get_by_email(email.value)
            if user is None or not user.is_active:
                logger.info(f"忘记密码请求的邮箱不可用: {email.value}")
                return None
            token = user.generate_password_reset_token(self.reset_lifetime)
            self.user_repository.save(user)
            self.transaction_manager.on_commit(lambda: self._send_password_reset_email(email.value, token))

    @service_operation("重置密码")
    def reset_password(self, command: ResetPasswordCommand) -> None:
        """
        Raises:
            ValidationException: 新密码不满足要求或两次输入不一致
            BusinessRuleViolationException: 重置令牌无效或已过期
        """
        validate_password(command.new_password)
        self._ensure_passwords_match(command.new_password, command.confirm_password)
        with self.transaction_manager.start():
            user = self.user_repository.get_by_reset_token(command.token)
            if user is None:
                raise BusinessRuleViolationException("User.InvalidResetToken", "密码重置令牌无效")
            user.reset_password(command.token, self.password_service.hash_password(command.new_password))
            self.user_repository.save(user)
        logger.info(f"用户密码已重置: {user.id}")

    @service_operation("修改密码")
    def change_password(self, command: ChangePasswordCommand) -> None:
        """
        修改密码，全部刷新令牌随之吊销。

        Raises:
            EntityNotFoundException: 用户不存在
            BusinessRuleViolationException: 当前密码错误或新密码与当前密码相同
        """
        validate_password(command.new_password)
        self._ensure_passwords_match(command.new_password, command.confirm_password)
        with self.transaction_manager.start():
            user = self.user_repository.get_by_id(command.user_id)
            if user is None:
                raise EntityNotFoundException("User", command.user_id)
            if not self.password_service.verify_password(command.current_password, user.password_hash):
                raise BusinessRuleViolationException("User.InvalidCurrentPassword", "当前密码错误")
            if self.password_service.verify_password(command.new_password, user.password_hash):
                raise BusinessRuleViolationException("User.SamePassword", "新密码不能与当前密码相同")
            user.update_password(self.password_service.hash_password(command.new_password))
            self.user_repository.save(user)
        logger.info(f"用户密码已修改: {user.id}")
