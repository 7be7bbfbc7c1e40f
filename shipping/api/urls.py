"""
地址API URL配置。
"""
from django.urls import path

from shipping.api import views

urlpatterns = [
    path('', views.AddressListCreateView.as_view(), name='address-list-create'),
    path('default/', views.DefaultAddressView.as_view(), name='address-default'),
    path('<uuid:address_id>/', views.AddressDetailView.as_view(), name='address-detail'),
    path('<uuid:address_id>/default/', views.AddressDefaultView.as_view(), name='address-set-default'),
]
