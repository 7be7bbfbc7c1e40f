"""
地址API视图。
所有接口都只操作当前登录用户自己的地址。
"""
import logging

from rest_framework.permissions import IsAuthenticated

from core.infrastructure.api_view import ApiBaseView
from shipping.api.serializers import CreateAddressSerializer, UpdateAddressSerializer
from shipping.application import (
    CreateAddressCommand,
    DeleteAddressCommand,
    SetDefaultAddressCommand,
    UpdateAddressCommand,
)
from shipping.domain import AddressType
from shipping.infrastructure.factory import ShippingInfrastructureFactory

logger = logging.getLogger(__name__)


def get_address_service():
    """获取地址应用服务实例"""
    return ShippingInfrastructureFactory().create_address_service()


def _postal_fields(data):
    return {
        "address_line1": data["address_line1"],
        "address_line2": data.get("address_line2") or None,
        "city": data["city"],
        "state": data["state"],
        "country": data["country"],
        "postal_code": data["postal_code"],
        "phone": data.get("phone") or None,
    }


class AddressListCreateView(ApiBaseView):
    """地址列表和创建接口"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return self.result_response(get_address_service().get_user_addresses(request.user.id), "获取地址列表成功")

    def post(self, request):
        data = self.validate(CreateAddressSerializer, request.data)
        command = CreateAddressCommand(
            user_id=request.user.id,
            address_type=data["address_type"],
            is_default=data["is_default"],
            **_postal_fields(data),
        )
        return self.result_response(get_address_service().create_address(command), "地址创建成功", created=True)


class AddressDetailView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def get(self, request, address_id):
        return self.result_response(get_address_service().get_address(address_id, request.user.id), "获取地址成功")

    def put(self, request, address_id):
        data = self.validate(UpdateAddressSerializer, request.data)
        command = UpdateAddressCommand(
            id=address_id,
            user_id=request.user.id,
            address_type=data.get("address_type") or None,
            **_postal_fields(data),
        )
        return self.result_response(get_address_service().update_address(command), "地址更新成功")

    def delete(self, request, address_id):
        command = DeleteAddressCommand(id=address_id, user_id=request.user.id)
        return self.result_response(get_address_service().delete_address(command), "地址删除成功")


class AddressDefaultView(ApiBaseView):
    permission_classes = [IsAuthenticated]

    def put(self, request, address_id):
        command = SetDefaultAddressCommand(id=address_id, user_id=request.user.id)
        return self.result_response(get_address_service().set_default_address(command), "默认地址设置成功")


class DefaultAddressView(ApiBaseView):
    """获取指定类型的默认地址，type参数缺省为Shipping"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        address_type = request.query_params.get("type") or AddressType.SHIPPING
        result = get_address_service().get_default_address(request.user.id, address_type)
        return self.result_response(result, "获取默认地址成功")
