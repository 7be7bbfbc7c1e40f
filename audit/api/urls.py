"""
审计日志API URL配置。
"""
from django.urls import path

from audit.api import views

urlpatterns = [
    path('', views.AuditLogListView.as_view(), name='audit-log-list'),
]
