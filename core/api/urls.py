"""
系统管理API URL配置。
"""
from django.urls import path

from core.api import views

urlpatterns = [
    path('cache/clear/', views.CacheClearView.as_view(), name='cache-clear'),
]
