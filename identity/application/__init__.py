"""
身份应用服务层包。
提供认证和用户应用服务、数据传输对象以及命令。
"""

# DTO
from identity.application.dtos import AuthTokenDTO, UserDTO

# 命令
from identity.application.commands import (
    ChangePasswordCommand,
    ChangeUserRoleCommand,
    ChangeUserStatusCommand,
    ForgotPasswordCommand,
    LoginCommand,
    LogoutCommand,
    RefreshTokenCommand,
    RegisterCommand,
    ResendVerificationCommand,
    ResetPasswordCommand,
    UpdateProfileCommand,
    UpdateUserCommand,
    VerifyEmailCommand,
)

# 应用服务
from identity.application.auth_service import AuthApplicationService
from identity.application.user_service import UserApplicationService

__all__ = [
    'AuthTokenDTO',
    'UserDTO',
    'ChangePasswordCommand',
    'ChangeUserRoleCommand',
    'ChangeUserStatusCommand',
    'ForgotPasswordCommand',
    'LoginCommand',
    'LogoutCommand',
    'RefreshTokenCommand',
    'RegisterCommand',
    'ResendVerificationCommand',
    'ResetPasswordCommand',
    'UpdateProfileCommand',
    'UpdateUserCommand',
    'VerifyEmailCommand',
    'AuthApplicationService',
    'UserApplicationService',
]
