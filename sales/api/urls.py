"""
购物车和订单API URL配置。
cart_urlpatterns挂载在cart/下，order_urlpatterns挂载在orders/下。
"""
from django.urls import path

from sales.api import views

cart_urlpatterns = [
    path('', views.CartView.as_view(), name='cart'),
    path('assign/', views.CartAssignView.as_view(), name='cart-assign'),
    path('clear/', views.CartClearView.as_view(), name='cart-clear'),
    path('items/', views.CartItemsView.as_view(), name='cart-items'),
    path('items/<uuid:item_id>/', views.CartItemDetailView.as_view(), name='cart-item-detail'),
]

order_urlpatterns = [
    path('', views.OrderCreateView.as_view(), name='order-create'),
    path('datatable/', views.OrderDataTableView.as_view(), name='order-datatable'),
    path('my-orders/', views.MyOrdersView.as_view(), name='order-my-orders'),
    path('recent/', views.RecentOrdersView.as_view(), name='order-recent'),
    path('<uuid:order_id>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('<uuid:order_id>/cancel/', views.OrderCancelView.as_view(), name='order-cancel'),
    path('<uuid:order_id>/status/', views.OrderStatusView.as_view(), name='order-status'),
    path('<uuid:order_id>/shipped/', views.OrderShippedView.as_view(), name='order-shipped'),
    path('<uuid:order_id>/delivered/', views.OrderDeliveredView.as_view(), name='order-delivered'),
]
