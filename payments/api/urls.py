"""
支付API URL配置。
order_urlpatterns挂载在orders/下，payment_method_urlpatterns挂载在payment-methods/下，
webhook_urlpatterns挂载在payments/下。
"""
from django.urls import path

from payments.api import views

order_urlpatterns = [
    path('<uuid:order_id>/payments/', views.OrderPaymentView.as_view(), name='order-payments'),
    path('<uuid:order_id>/refund/', views.OrderRefundView.as_view(), name='order-refund'),
    path('<uuid:order_id>/partial-refund/', views.OrderPartialRefundView.as_view(), name='order-partial-refund'),
]

payment_method_urlpatterns = [
    path('', views.PaymentMethodListCreateView.as_view(), name='payment-method-list-create'),
    path('<uuid:method_id>/', views.PaymentMethodDetailView.as_view(), name='payment-method-detail'),
    path('<uuid:method_id>/default/', views.PaymentMethodDefaultView.as_view(), name='payment-method-default'),
]

webhook_urlpatterns = [
    path('webhooks/<str:provider>/process/', views.WebhookView.as_view(), name='payment-webhook'),
]
