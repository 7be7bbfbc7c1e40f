"""
DRF认证类。
从Authorization: Bearer <jwt>请求头中解析访问令牌，构造当前用户。
"""
import uuid

from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from identity.infrastructure.security import TokenService


class AuthenticatedUser:
    """
    由访问令牌还原的当前用户。
    只携带令牌中的身份信息，不访问数据库。
    """

    is_authenticated = True
    is_anonymous = False

    def __init__(self, id: uuid.UUID, email: str, role: str):
        self.id = id
        self.pk = id
        self.email = email
        self.role = role

    def __str__(self):
        return self.email


class JWTAuthentication(BaseAuthentication):
    """Bearer JWT认证"""

    keyword = "Bearer"

    def authenticate(self, request):
        header = get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise AuthenticationFailed("认证头格式无效")

        try:
            token = header[1].decode()
        except UnicodeError:
            raise AuthenticationFailed("认证头格式无效")

        payload = TokenService().decode_access_token(token)
        if payload is None:
            raise AuthenticationFailed("访问令牌无效或已过期")
        try:
            user_id = uuid.UUID(payload["sub"])
        except (KeyError, ValueError):
            raise AuthenticationFailed("访问令牌无效")
        return AuthenticatedUser(user_id, payload.get("email", ""), payload.get("role", "")), token

    def authenticate_header(self, request):
        return self.keyword
