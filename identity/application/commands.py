"""
身份应用服务层的命令对象。
"""
from dataclasses import dataclass
from typing import Any, Optional


# ==================== 认证 ====================

@dataclass
class RegisterCommand:
    """注册命令"""
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class LoginCommand:
    """登录命令"""
    email: str
    password: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class RefreshTokenCommand:
    refresh_token: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class LogoutCommand:
    refresh_token: str
    reason: Optional[str] = None


@dataclass
class VerifyEmailCommand:
    token: str


@dataclass
class ResendVerificationCommand:
    email: str


@dataclass
class ForgotPasswordCommand:
    email: str


@dataclass
class ResetPasswordCommand:
    """重置密码命令"""
    token: str
    new_password: str
    confirm_password: str


@dataclass
class ChangePasswordCommand:
    """修改密码命令"""
    user_id: Any
    current_password: str
    new_password: str
    confirm_password: str


# ==================== 用户 ====================

@dataclass
class UpdateProfileCommand:
    """更新个人资料命令"""
    user_id: Any
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class UpdateUserCommand:
    """管理员更新用户命令，email为空时不修改邮箱"""
    id: Any
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass
class ChangeUserRoleCommand:
    id: Any
    role: str


@dataclass
class ChangeUserStatusCommand:
    """变更用户状态命令，current_user_id为执行操作的用户"""
    id: Any
    is_active: bool
    current_user_id: Optional[Any] = None
