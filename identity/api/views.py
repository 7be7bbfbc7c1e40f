"""
身份API视图。
提供认证和用户管理的RESTful API接口。
"""
import logging

from rest_framework.permissions import IsAuthenticated

from core.application.pagination import DataTableRequest
from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.permissions import IsAdmin, IsAdminOrManager
from identity.api.serializers import (
    ChangePasswordSerializer,
    ChangeRoleSerializer,
    EmailSerializer,
    LoginSerializer,
    LogoutSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UpdateProfileSerializer,
    UpdateUserSerializer,
    UserStatusSerializer,
)
from identity.application import (
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
from identity.infrastructure.factory import IdentityInfrastructureFactory

logger = logging.getLogger(__name__)


def get_auth_service():
    """获取认证应用服务实例"""
    return IdentityInfrastructureFactory().create_auth_service()


def get_user_service():
    return IdentityInfrastructureFactory().create_user_service()


# ==================== 认证 ====================

class RegisterView(ApiBaseView):
    """注册接口"""
    authentication_classes = []

    def post(self, request):
        data = self.validate(RegisterSerializer, request.data)
        ip_address, user_agent = self.get_client_info(request)
        command = RegisterCommand(
            email=data["email"],
            password=data["password"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            phone=data.get("phone") or None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return self.result_response(get_auth_service().register(command), "注册成功", created=True)


class LoginView(ApiBaseView):
    """登录接口"""
    authentication_classes = []

    def post(self, request):
        data = self.validate(LoginSerializer, request.data)
        ip_address, user_agent = self.get_client_info(request)
        command = LoginCommand(
            email=data["email"], password=data["password"], ip_address=ip_address, user_agent=user_agent
        )
        return self.result_response(get_auth_service().login(command), "登录成功")


class RefreshTokenView(ApiBaseView):
    authentication_classes = []

    def post(self, request):
        data = self.validate(RefreshTokenSerializer, request.data)
        ip_address, user_agent = self.get_client_info(request)
        command = RefreshTokenCommand(
            refresh_token=data["refresh_token"], ip_address=ip_address, user_agent=user_agent
        )
        return self.result_response(get_auth_service().refresh_token(command), "令牌刷新成功")


class LogoutView(ApiBaseView):
    """登出接口，需要登录"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        data = self.validate(LogoutSerializer, request.data)
        command = LogoutCommand(refresh_token=data["refresh_token"], reason=data.get("reason"))
        return self.result_response(get_auth_service().logout(command), "登出成功")


class VerifyEmailView(ApiBaseView):
    authentication_classes = []

    def get(self, request, token):
        return self.result_response(get_auth_service().verify_email(VerifyEmailCommand(token=token)), "邮箱验证成功")


class ResendVerificationView(ApiBaseView):
    authentication_classes = []

    def post(self, request):
        data = self.validate(EmailSerializer, request.data)
        result = get_auth_service().resend_verification(ResendVerificationCommand(email=data["email"]))
        return self.result_response(result, "验证邮件已发送")


class ForgotPasswordView(ApiBaseView):
    authentication_classes = []

    def post(self, request):
        data = self.validate(EmailSerializer, request.data)
        result = get_auth_service().forgot_password(ForgotPasswordCommand(email=data["email"]))
        return self.result_response(result, "如果该邮箱已注册，重置密码邮件已发送")


class ResetPasswordView(ApiBaseView):
    authentication_classes = []

    def post(self, request):
        data = self.validate(ResetPasswordSerializer, request.data)
        command = ResetPasswordCommand(
            token=data["token"], new_password=data["new_password"], confirm_password=data["confirm_password"]
        )
        return self.result_response(get_auth_service().reset_password(command), "密码重置成功")


# ==================== 当前用户 ====================

class CurrentUserView(ApiBaseView):
    """当前用户资料接口"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return self.result_response(get_user_service().get_profile(request.user.id), "获取个人资料成功")

    def put(self, request):
        data = self.validate(UpdateProfileSerializer, request.data)
        command = UpdateProfileCommand(
            user_id=request.user.id,
            first_name=data["first_name"],
            last_name=data["last_name"],
            middle_name=data.get("middle_name") or None,
            phone=data.get("phone") or None,
        )
        return self.result_response(get_user_service().update_profile(command), "个人资料更新成功")


class ChangePasswordView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        data = self.validate(ChangePasswordSerializer, request.data)
        command = ChangePasswordCommand(
            user_id=request.user.id,
            current_password=data["current_password"],
            new_password=data["new_password"],
            confirm_password=data["confirm_password"],
        )
        return self.result_response(get_auth_service().change_password(command), "密码修改成功")


# ==================== 用户管理 ====================

class UserListView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        page, page_size = self.get_page_params(request)
        is_active = request.query_params.get("is_active")
        result = get_user_service().list_users(
            page=page,
            page_size=page_size,
            role=request.query_params.get("role") or None,
            is_active=None if is_active is None else is_active.lower() in ("1", "true"),
        )
        return self.result_response(result, "获取用户列表成功")


class UserDataTableView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        result = get_user_service().get_datatable(DataTableRequest.from_dict(request.data))
        return self.result_response(result, "查询成功")


class UserDetailView(ApiBaseView):
    """用户详情和更新接口"""
    permission_classes = [IsAdminOrManager]

    def get(self, request, user_id):
        return self.result_response(get_user_service().get_user(user_id), "获取用户成功")

    def put(self, request, user_id):
        data = self.validate(UpdateUserSerializer, request.data)
        command = UpdateUserCommand(
            id=user_id,
            first_name=data["first_name"],
            last_name=data["last_name"],
            middle_name=data.get("middle_name") or None,
            phone=data.get("phone") or None,
            email=data.get("email") or None,
        )
        return self.result_response(get_user_service().update_user(command), "用户更新成功")


class UserRoleView(ApiBaseView):
    """变更用户角色，仅管理员"""
    permission_classes = [IsAdmin]

    def put(self, request, user_id):
        data = self.validate(ChangeRoleSerializer, request.data)
        command = ChangeUserRoleCommand(id=user_id, role=data["role"])
        return self.result_response(get_user_service().change_role(command), "用户角色更新成功")


class UserStatusView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, user_id):
        data = self.validate(UserStatusSerializer, request.data)
        command = ChangeUserStatusCommand(id=user_id, is_active=data["is_active"], current_user_id=request.user.id)
        return self.result_response(get_user_service().change_status(command), "用户状态更新成功")
