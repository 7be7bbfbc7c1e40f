"""
身份应用服务层的数据传输对象(DTOs)。
"""
from typing import Any, Dict, Optional

from identity.domain import User


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class UserDTO:
    """用户DTO，不包含密码哈希和各类令牌"""

    def __init__(self, user: User):
        self.id = str(user.id)
        self.email = user.email.value
        self.first_name = user.full_name.first_name
        self.middle_name = user.full_name.middle_name
        self.last_name = user.full_name.last_name
        self.full_name = str(user.full_name)
        self.phone = user.phone.value if user.phone else None
        self.role = user.role
        self.is_active = user.is_active
        self.email_verified = user.email_verified
        self.last_login = user.last_login
        self.failed_login_attempts = user.failed_login_attempts
        self.created_at = user.created_at
        self.updated_at = user.updated_at

    @classmethod
    def from_domain(cls, user: User) -> 'UserDTO':
        return cls(user)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role,
            "is_active": self.is_active,
            "email_verified": self.email_verified,
            "last_login": _iso(self.last_login),
            "failed_login_attempts": self.failed_login_attempts,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class AuthTokenDTO:
    """
    登录、注册和刷新令牌的结果。
    包含用户基本信息、访问令牌和刷新令牌。
    """

    token_type = "Bearer"

    def __init__(self, user: User, access_token: str, refresh_token: str, expires_in: int):
        self.user_id = str(user.id)
        self.email = user.email.value
        self.first_name = user.full_name.first_name
        self.last_name = user.full_name.last_name
        self.role = user.role
        self.email_verified = user.email_verified
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_in = expires_in

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "email_verified": self.email_verified,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }
