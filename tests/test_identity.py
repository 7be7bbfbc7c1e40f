"""
身份测试：注册、登录锁定、令牌轮换、邮箱验证和密码管理。
"""
import pytest
from django.core import mail

from conftest import DEFAULT_PASSWORD
from identity.application.commands import (
    ChangePasswordCommand,
    ChangeUserStatusCommand,
    ForgotPasswordCommand,
    LoginCommand,
    LogoutCommand,
    RefreshTokenCommand,
    RegisterCommand,
    ResetPasswordCommand,
    VerifyEmailCommand,
)
from identity.infrastructure.factory import IdentityInfrastructureFactory
from identity.infrastructure.repositories import DjangoUserRepository

NEW_PASSWORD = "N3wPassw0rd!"


@pytest.fixture
def auth_service(db):
    return IdentityInfrastructureFactory().create_auth_service()


@pytest.fixture
def user_service(db):
    return IdentityInfrastructureFactory().create_user_service()


def register(service, email="jane@example.com", password=DEFAULT_PASSWORD):
    return service.register(RegisterCommand(email=email, password=password, first_name="Jane", last_name="Doe"))


@pytest.mark.django_db
class TestRegistration:

    def test_register_issues_tokens_and_sends_verification(self, auth_service, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            result = register(auth_service, email="Jane@Example.com")

        assert result.is_success
        tokens = result.value
        assert tokens.email == "jane@example.com"
        assert tokens.access_token and tokens.refresh_token
        assert tokens.email_verified is False

        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == "请验证您的邮箱"
        assert "http://testserver/verify-email?token=" in mail.outbox[0].body

    def test_duplicate_email(self, auth_service):
        register(auth_service)
        result = register(auth_service, email="JANE@example.com")
        assert result.error.code == "User.Duplicate"

    def test_weak_password(self, auth_service):
        result = register(auth_service, password="password")
        assert result.error.code == "Validation.password"

    def test_verify_email(self, auth_service):
        register(auth_service)
        user = DjangoUserRepository().get_by_email("jane@example.com")

        assert auth_service.verify_email(VerifyEmailCommand(user.email_verification_token)).is_success
        assert DjangoUserRepository().get_by_email("jane@example.com").email_verified is True

        again = auth_service.verify_email(VerifyEmailCommand(user.email_verification_token))
        assert again.error.code == "User.InvalidVerificationToken"


@pytest.mark.django_db
class TestLogin:

    def test_login_success_resets_failures(self, auth_service, customer):
        auth_service.login(LoginCommand(email=customer.email.value, password="Wrong-pass1"))
        result = auth_service.login(LoginCommand(email=customer.email.value, password=DEFAULT_PASSWORD))

        assert result.is_success
        stored = DjangoUserRepository().get_by_id(customer.id)
        assert stored.failed_login_attempts == 0
        assert stored.last_login is not None

    def test_unknown_user_and_wrong_password_look_the_same(self, auth_service, customer):
        unknown = auth_service.login(LoginCommand(email="nobody@example.com", password=DEFAULT_PASSWORD))
        wrong = auth_service.login(LoginCommand(email=customer.email.value, password="Wrong-pass1"))
        assert unknown.error.code == wrong.error.code == "User.InvalidCredentials"
        assert unknown.error.message == wrong.error.message

    def test_account_is_locked_after_repeated_failures(self, auth_service, customer):
        command = LoginCommand(email=customer.email.value, password="Wrong-pass1")
        codes = [auth_service.login(command).error.code for _ in range(5)]

        assert codes == ["User.InvalidCredentials"] * 4 + ["User.AccountLocked"]
        assert DjangoUserRepository().get_by_id(customer.id).is_active is False

        correct = auth_service.login(LoginCommand(email=customer.email.value, password=DEFAULT_PASSWORD))
        assert correct.error.code == "User.AccountInactive"


@pytest.mark.django_db
class TestRefreshTokens:

    def test_refresh_rotates_token(self, auth_service):
        first = register(auth_service).value

        second = auth_service.refresh_token(RefreshTokenCommand(first.refresh_token))
        assert second.is_success
        assert second.value.refresh_token != first.refresh_token

        reused = auth_service.refresh_token(RefreshTokenCommand(first.refresh_token))
        assert reused.error.code == "RefreshToken.Revoked"

    def test_unknown_token(self, auth_service):
        result = auth_service.refresh_token(RefreshTokenCommand("does-not-exist"))
        assert result.error.code == "RefreshToken.Invalid"

    def test_logout_revokes_token(self, auth_service):
        tokens = register(auth_service).value

        assert auth_service.logout(LogoutCommand(tokens.refresh_token)).is_success
        assert auth_service.logout(LogoutCommand(tokens.refresh_token)).is_success
        result = auth_service.refresh_token(RefreshTokenCommand(tokens.refresh_token))
        assert result.error.code == "RefreshToken.Revoked"


@pytest.mark.django_db
class TestPasswords:

    def test_forgot_and_reset_password(self, auth_service, customer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            assert auth_service.forgot_password(ForgotPasswordCommand(customer.email.value)).is_success
        assert mail.outbox[0].subject == "重置密码"
        assert "reset-password?token=" in mail.outbox[0].body

        token = DjangoUserRepository().get_by_id(customer.id).password_reset_token
        result = auth_service.reset_password(ResetPasswordCommand(token, NEW_PASSWORD, NEW_PASSWORD))
        assert result.is_success
        assert auth_service.login(LoginCommand(email=customer.email.value, password=NEW_PASSWORD)).is_success

        reused = auth_service.reset_password(ResetPasswordCommand(token, NEW_PASSWORD, NEW_PASSWORD))
        assert reused.error.code == "User.InvalidResetToken"

    def test_forgot_password_for_unknown_email_succeeds_silently(
            self, auth_service, db, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            result = auth_service.forgot_password(ForgotPasswordCommand("ghost@example.com"))
        assert result.is_success
        assert mail.outbox == []

    def test_change_password_revokes_refresh_tokens(self, auth_service):
        tokens = register(auth_service).value

        result = auth_service.change_password(ChangePasswordCommand(
            user_id=tokens.user_id,
            current_password=DEFAULT_PASSWORD,
            new_password=NEW_PASSWORD,
            confirm_password=NEW_PASSWORD,
        ))

        assert result.is_success
        assert auth_service.refresh_token(RefreshTokenCommand(tokens.refresh_token)).error.code == \
            "RefreshToken.Revoked"

    @pytest.mark.parametrize("current, new, confirm, code", [
        ("Wrong-pass1", NEW_PASSWORD, NEW_PASSWORD, "User.InvalidCurrentPassword"),
        (DEFAULT_PASSWORD, DEFAULT_PASSWORD, DEFAULT_PASSWORD, "User.SamePassword"),
        (DEFAULT_PASSWORD, NEW_PASSWORD, "Other-pass1", "Validation.confirm_password"),
    ])
    def test_change_password_errors(self, auth_service, customer, current, new, confirm, code):
        result = auth_service.change_password(ChangePasswordCommand(customer.id, current, new, confirm))
        assert result.error.code == code


@pytest.mark.django_db
class TestUserService:

    def test_admin_cannot_deactivate_self(self, user_service, admin_user):
        result = user_service.change_status(ChangeUserStatusCommand(
            id=admin_user.id, is_active=False, current_user_id=admin_user.id
        ))
        assert result.error.code == "User.CannotDeactivateSelf"

    def test_deactivate_other_user(self, user_service, admin_user, customer):
        result = user_service.change_status(ChangeUserStatusCommand(
            id=customer.id, is_active=False, current_user_id=admin_user.id
        ))
        assert result.value.is_active is False


@pytest.mark.django_db
class TestIdentityApi:

    def test_register_endpoint(self, api_client):
        response = api_client.post("/v1/auth/register/", {
            "email": "new@example.com",
            "password": DEFAULT_PASSWORD,
            "first_name": "New",
            "last_name": "User",
        })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["email"] == "new@example.com"

    def test_login_with_bad_password(self, api_client, customer):
        response = api_client.post("/v1/auth/login/", {"email": "customer@example.com", "password": "Wrong-pass1"})
        assert response.status_code == 401
        assert response.json()["data"]["code"] == "User.InvalidCredentials"

    def test_current_user(self, auth_client, customer):
        response = auth_client(customer).get("/v1/users/me/")

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "customer@example.com"

    def test_user_list_requires_staff(self, auth_client, customer):
        assert auth_client(customer).get("/v1/users/").status_code == 403
