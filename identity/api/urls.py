"""
身份API URL配置。
"""
from django.urls import path

from identity.api import views

auth_urlpatterns = [
    path('register/', views.RegisterView.as_view(), name='auth-register'),
    path('login/', views.LoginView.as_view(), name='auth-login'),
    path('refresh-token/', views.RefreshTokenView.as_view(), name='auth-refresh-token'),
    path('logout/', views.LogoutView.as_view(), name='auth-logout'),
    path('verify-email/<str:token>/', views.VerifyEmailView.as_view(), name='auth-verify-email'),
    path('resend-verification/', views.ResendVerificationView.as_view(), name='auth-resend-verification'),
    path('forgot-password/', views.ForgotPasswordView.as_view(), name='auth-forgot-password'),
    path('reset-password/', views.ResetPasswordView.as_view(), name='auth-reset-password'),
]

user_urlpatterns = [
    path('', views.UserListView.as_view(), name='user-list'),
    path('me/', views.CurrentUserView.as_view(), name='user-me'),
    path('change-password/', views.ChangePasswordView.as_view(), name='user-change-password'),
    path('datatable/', views.UserDataTableView.as_view(), name='user-datatable'),
    path('<uuid:user_id>/', views.UserDetailView.as_view(), name='user-detail'),
    path('<uuid:user_id>/role/', views.UserRoleView.as_view(), name='user-role'),
    path('<uuid:user_id>/status/', views.UserStatusView.as_view(), name='user-status'),
]
