"""
API权限类。
基于JWT认证后request.user上的role判断访问权限。
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

ROLE_ADMIN = "Admin"
ROLE_MANAGER = "Manager"
STAFF_ROLES = (ROLE_ADMIN, ROLE_MANAGER)


def is_staff(user) -> bool:
    """判断用户是否为管理员或经理"""
    return bool(user and getattr(user, "is_authenticated", False) and getattr(user, "role", None) in STAFF_ROLES)


class IsAdmin(BasePermission):
    message = "需要管理员权限"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "role", None) == ROLE_ADMIN)


class IsAdminOrManager(BasePermission):
    message = "需要管理员或经理权限"

    def has_permission(self, request, view):
        return is_staff(request.user)


class IsStaffOrReadOnly(BasePermission):
    """读操作对所有人开放，写操作需要管理员或经理权限"""
    message = "需要管理员或经理权限"

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_staff(request.user)
