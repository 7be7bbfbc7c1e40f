"""
身份安全组件。
提供基于Django密码哈希器的密码服务和基于PyJWT的访问令牌服务。
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
import jwt
from loguru import logger

from identity.domain import User


class PasswordService:
    """密码哈希与校验，使用settings.PASSWORD_HASHERS中配置的哈希器"""

    def hash_password(self, password: str) -> str:
        return make_password(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        return check_password(password, password_hash)


class TokenService:
    """
    JWT访问令牌服务。

    令牌使用settings.JWT_SETTINGS中的密钥和算法签名，
    载荷包含sub、email、role、iat、exp、iss、aud。
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        options = options or getattr(settings, "JWT_SETTINGS", {})
        self.secret = options.get("SECRET") or settings.SECRET_KEY
        self.algorithm = options.get("ALGORITHM", "HS256")
        self.issuer = options.get("ISSUER", "shopilent")
        self.audience = options.get("AUDIENCE", "shopilent-clients")
        self.access_token_lifetime = timedelta(minutes=int(options.get("ACCESS_TOKEN_LIFETIME_MINUTES", 60)))
        self.refresh_token_lifetime = timedelta(days=int(options.get("REFRESH_TOKEN_LIFETIME_DAYS", 7)))

    def generate_access_token(self, user: User) -> str:
        """
        为用户签发访问令牌。

        Args:
            user: 用户聚合根

        Returns:
            编码后的JWT字符串
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email.value,
            "role": user.role,
            "iat": now,
            "exp": now + self.access_token_lifetime,
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        校验并解码访问令牌。

        Args:
            token: JWT字符串

        Returns:
            令牌载荷，签名无效、过期或签发者/受众不匹配时返回None
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("访问令牌已过期")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"访问令牌无效: {e}")
            return None

    @property
    def access_token_expires_in(self) -> int:
        return int(self.access_token_lifetime.total_seconds())
