"""
shopilent项目的URL配置。
所有API挂载在v1/下。
"""
from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path

from identity.api.urls import auth_urlpatterns, user_urlpatterns
from payments.api.urls import order_urlpatterns as payment_order_urlpatterns
from payments.api.urls import payment_method_urlpatterns, webhook_urlpatterns
from sales.api.urls import cart_urlpatterns, order_urlpatterns

urlpatterns = [
    # 商品目录API
    path('v1/', include('catalog.api.urls')),
    # 身份API
    path('v1/auth/', include(auth_urlpatterns)),
    path('v1/users/', include(user_urlpatterns)),
    # 地址API
    path('v1/addresses/', include('shipping.api.urls')),
    # 购物车和订单API
    path('v1/cart/', include(cart_urlpatterns)),
    path('v1/orders/', include(order_urlpatterns)),
    # 支付API
    path('v1/orders/', include(payment_order_urlpatterns)),
    path('v1/payment-methods/', include(payment_method_urlpatterns)),
    path('v1/payments/', include(webhook_urlpatterns)),
    # 管理API
    path('v1/audit-logs/', include('audit.api.urls')),
    path('v1/administration/', include('core.api.urls')),
]

# 在开发环境中提供媒体文件服务
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
