"""
购物车和订单API视图。
购物车接口允许匿名访问，匿名购物车通过cart_id标识。
"""
import logging

from rest_framework.permissions import IsAuthenticated

from core.application.pagination import DataTableRequest
from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.permissions import IsAdminOrManager, is_staff
from sales.api.serializers import (
    AddCartItemSerializer,
    AssignCartSerializer,
    CancelOrderSerializer,
    CartIdSerializer,
    CreateCartSerializer,
    CreateOrderSerializer,
    ShipOrderSerializer,
    UpdateCartItemSerializer,
    UpdateOrderStatusSerializer,
)
from sales.application import (
    AddItemToCartCommand,
    AssignCartCommand,
    CancelOrderCommand,
    ClearCartCommand,
    CreateCartCommand,
    CreateOrderFromCartCommand,
    MarkOrderDeliveredCommand,
    MarkOrderShippedCommand,
    RemoveCartItemCommand,
    UpdateCartItemCommand,
    UpdateOrderStatusCommand,
)
from sales.infrastructure.factory import SalesInfrastructureFactory

logger = logging.getLogger(__name__)


def get_cart_service():
    return SalesInfrastructureFactory().create_cart_service()


def get_order_service():
    return SalesInfrastructureFactory().create_order_service()


def current_user_id(request):
    """当前登录用户ID，匿名请求返回None"""
    user = request.user
    return user.id if user and user.is_authenticated else None


# ==================== 购物车 ====================

class CartView(ApiBaseView):
    """GET获取购物车，POST创建购物车"""

    def get(self, request):
        cart_id = request.query_params.get("cart_id") or None
        result = get_cart_service().get_cart(cart_id, current_user_id(request))
        return self.result_response(result, "获取购物车成功")

    def post(self, request):
        data = self.validate(CreateCartSerializer, request.data)
        command = CreateCartCommand(user_id=current_user_id(request), metadata=data["metadata"])
        return self.result_response(get_cart_service().create_cart(command), "购物车创建成功", created=True)


class CartAssignView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        data = self.validate(AssignCartSerializer, request.data)
        command = AssignCartCommand(cart_id=data["cart_id"], user_id=request.user.id)
        return self.result_response(get_cart_service().assign_cart(command), "购物车分配成功")


class CartClearView(ApiBaseView):

    def post(self, request):
        data = self.validate(CartIdSerializer, request.data)
        command = ClearCartCommand(cart_id=data.get("cart_id"), user_id=current_user_id(request))
        return self.result_response(get_cart_service().clear_cart(command), "购物车已清空")


class CartItemsView(ApiBaseView):

    def post(self, request):
        data = self.validate(AddCartItemSerializer, request.data)
        command = AddItemToCartCommand(
            product_id=data["product_id"],
            variant_id=data.get("variant_id"),
            quantity=data["quantity"],
            cart_id=data.get("cart_id"),
            user_id=current_user_id(request),
        )
        return self.result_response(get_cart_service().add_item(command), "商品已加入购物车")


class CartItemDetailView(ApiBaseView):

    def put(self, request, item_id):
        data = self.validate(UpdateCartItemSerializer, request.data)
        command = UpdateCartItemCommand(
            item_id=item_id,
            quantity=data["quantity"],
            cart_id=data.get("cart_id"),
            user_id=current_user_id(request),
        )
        return self.result_response(get_cart_service().update_item_quantity(command), "购物车已更新")

    def delete(self, request, item_id):
        command = RemoveCartItemCommand(
            item_id=item_id,
            cart_id=request.query_params.get("cart_id") or None,
            user_id=current_user_id(request),
        )
        return self.result_response(get_cart_service().remove_item(command), "商品已移出购物车")


# ==================== 订单 ====================

class OrderCreateView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        data = self.validate(CreateOrderSerializer, request.data)
        command = CreateOrderFromCartCommand(
            user_id=request.user.id,
            shipping_address_id=data["shipping_address_id"],
            billing_address_id=data.get("billing_address_id"),
            shipping_method=data["shipping_method"],
            cart_id=data.get("cart_id"),
        )
        return self.result_response(get_order_service().create_order_from_cart(command), "订单创建成功", created=True)


class OrderDataTableView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        result = get_order_service().get_datatable(DataTableRequest.from_dict(request.data))
        return self.result_response(result, "查询成功")


class MyOrdersView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page, page_size = self.get_page_params(request)
        result = get_order_service().get_user_orders(request.user.id, page, page_size)
        return self.result_response(result, "获取订单成功")


class RecentOrdersView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        try:
            count = min(100, max(1, int(request.query_params.get("count", 10))))
        except ValueError:
            count = 10
        return self.result_response(get_order_service().get_recent_orders(count), "获取最近订单成功")


class OrderDetailView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        result = get_order_service().get_order(order_id, request.user.id, is_staff(request.user))
        return self.result_response(result, "获取订单成功")


class OrderCancelView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def post(self, request, order_id):
        data = self.validate(CancelOrderSerializer, request.data)
        command = CancelOrderCommand(
            order_id=order_id,
            user_id=request.user.id,
            reason=data.get("reason") or None,
            is_staff=is_staff(request.user),
        )
        return self.result_response(get_order_service().cancel_order(command), "订单已取消")


class OrderStatusView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, order_id):
        data = self.validate(UpdateOrderStatusSerializer, request.data)
        command = UpdateOrderStatusCommand(order_id=order_id, status=data["status"])
        return self.result_response(get_order_service().update_status(command), "订单状态已更新")


class OrderShippedView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, order_id):
        data = self.validate(ShipOrderSerializer, request.data)
        command = MarkOrderShippedCommand(order_id=order_id, tracking_number=data.get("tracking_number") or None)
        return self.result_response(get_order_service().mark_as_shipped(command), "订单已发货")


class OrderDeliveredView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, order_id):
        command = MarkOrderDeliveredCommand(order_id=order_id)
        return self.result_response(get_order_service().mark_as_delivered(command), "订单已送达")
