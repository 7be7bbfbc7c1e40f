"""
基于Django ORM的用户仓储实现。
用户与其刷新令牌作为一个聚合在同一事务中保存。
"""
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from loguru import logger

from core.application.pagination import DataTableRequest
from core.domain import Email, PhoneNumber
from core.infrastructure.repositories import DjangoRepositoryMixin, apply_datatable, paginate_queryset
from identity.domain import FullName, RefreshToken, User, UserRepository
from identity.infrastructure.models import RefreshTokenModel, UserModel


class DjangoUserRepository(DjangoRepositoryMixin, UserRepository):
    """
    基于Django ORM的用户仓储实现。
    """

    model_class = UserModel
    entity_name = "User"

    DATATABLE_COLUMNS = {
        "email": "email",
        "first_name": "first_name",
        "last_name": "last_name",
        "role": "role",
        "is_active": "is_active",
        "email_verified": "email_verified",
        "last_login": "last_login",
        "created_at": "created_at",
    }

    def _queryset(self):
        return UserModel.objects.prefetch_related("refresh_tokens")

    def _token_to_domain(self, model: RefreshTokenModel) -> RefreshToken:
        return RefreshToken(
            id=model.id,
            user_id=model.user_id,
            token=model.token,
            issued_at=model.issued_at,
            expires_at=model.expires_at,
            is_revoked=model.is_revoked,
            revoked_reason=model.revoked_reason,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_domain(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=Email(model.email),
            password_hash=model.password_hash,
            full_name=FullName(model.first_name, model.last_name, model.middle_name),
            phone=PhoneNumber(model.phone) if model.phone else None,
            role=model.role,
            is_active=model.is_active,
            email_verified=model.email_verified,
            email_verification_token=model.email_verification_token,
            email_verification_expires=model.email_verification_expires,
            password_reset_token=model.password_reset_token,
            password_reset_expires=model.password_reset_expires,
            last_login=model.last_login,
            failed_login_attempts=model.failed_login_attempts,
            last_failed_attempt=model.last_failed_attempt,
            refresh_tokens=[self._token_to_domain(t) for t in model.refresh_tokens.all()],
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model_values(self, user: User) -> Dict[str, Any]:
        return {
            "email": user.email.value,
            "password_hash": user.password_hash,
            "first_name": user.full_name.first_name,
            "middle_name": user.full_name.middle_name,
            "last_name": user.full_name.last_name,
            "phone": user.phone.value if user.phone else None,
            "role": user.role,
            "is_active": user.is_active,
            "email_verified": user.email_verified,
            "email_verification_token": user.email_verification_token,
            "email_verification_expires": user.email_verification_expires,
            "password_reset_token": user.password_reset_token,
            "password_reset_expires": user.password_reset_expires,
            "last_login": user.last_login,
            "failed_login_attempts": user.failed_login_attempts,
            "last_failed_attempt": user.last_failed_attempt,
        }

    @staticmethod
    def _token_values(token: RefreshToken) -> Dict[str, Any]:
        return {
            "token": token.token,
            "issued_at": token.issued_at,
            "expires_at": token.expires_at,
            "is_revoked": token.is_revoked,
            "revoked_reason": token.revoked_reason,
            "ip_address": token.ip_address,
            "user_agent": token.user_agent,
            "created_at": token.created_at,
            "updated_at": token.updated_at,
        }

    def save(self, user: User) -> User:
        with transaction.atomic():
            self._persist(user)
            self._sync_children(
                RefreshTokenModel, {"user_id": user.id}, user.refresh_tokens, self._token_values
            )
            self._dispatch_events(user)
        logger.debug(f"用户已保存: {user.id} v{user.version}")
        return user

    def _first(self, **lookup) -> Optional[User]:
        model = self._queryset().filter(**lookup).first()
        return self._to_domain(model) if model else None

    def get_by_id(self, id: Any) -> Optional[User]:
        return self._first(pk=id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._first(email__iexact=(email or "").strip())

    def email_exists(self, email: str, exclude_id: Any = None) -> bool:
        queryset = UserModel.objects.filter(email__iexact=(email or "").strip())
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def get_by_refresh_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self._first(refresh_tokens__token=token)

    def get_by_verification_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self._first(email_verification_token=token)

    def get_by_reset_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self._first(password_reset_token=token)

    def paginate(self, page: int = 1, page_size: int = 20, **filters: Any) -> Tuple[List[User], int]:
        queryset = self._queryset()
        if filters.get("role"):
            queryset = queryset.filter(role=filters["role"])
        if filters.get("is_active") is not None:
            queryset = queryset.filter(is_active=filters["is_active"])
        models, total = paginate_queryset(queryset.order_by("-created_at"), page, page_size)
        return [self._to_domain(m) for m in models], total

    def datatable(self, request: DataTableRequest) -> Tuple[List[User], int, int]:
        models, total, filtered = apply_datatable(
            self._queryset(),
            request,
            search_fields=("email", "first_name", "last_name", "phone"),
            column_map=self.DATATABLE_COLUMNS,
        )
        return [self._to_domain(m) for m in models], total, filtered
