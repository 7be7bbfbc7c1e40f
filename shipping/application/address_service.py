"""
地址应用服务。
处理地址的命令和查询，维护每个用户每种地址类型至多一个默认地址。
"""
from typing import List, Optional

from loguru import logger

from core.application.services import ApplicationService, service_operation
from core.domain import EntityNotFoundException, PostalAddress
from core.infrastructure.cache import CacheService
from core.infrastructure.transaction import TransactionManager
from shipping.application.commands import (
    CreateAddressCommand,
    DeleteAddressCommand,
    SetDefaultAddressCommand,
    UpdateAddressCommand,
)
from shipping.application.dtos import AddressDTO
from shipping.domain import Address, AddressRepository, AddressType

CACHE_TIMEOUT = 900


class AddressApplicationService(ApplicationService):
    """
    地址应用服务。
    """

    def __init__(
        self,
        address_repository: AddressRepository,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        super().__init__(transaction_manager, cache_service)
        self.address_repository = address_repository

    def _get_owned_address(self, address_id, user_id) -> Address:
        """
        获取属于用户的地址。其他用户的地址视为不存在。

        Raises:
            EntityNotFoundException: 地址不存在或不属于该用户
        """
        address = self.address_repository.get_by_id(address_id)
        if address is None or str(address.user_id) != str(user_id):
            raise EntityNotFoundException("Address", address_id)
        return address

    def _unset_other_defaults(self, address: Address) -> None:
        for other in self.address_repository.get_by_user(address.user_id):
            if other.id != address.id and other.is_default and other.overlaps(address.address_type):
                other.set_default(False)
                self.address_repository.save(other)

    # ==================== 命令处理方法 ====================

    @service_operation("创建地址")
    def create_address(self, command: CreateAddressCommand) -> AddressDTO:
        """
        创建地址。用户的第一个地址自动成为默认地址。

        Args:
            command: 创建地址命令

        Returns:
            创建的地址DTO
        """
        postal_address = PostalAddress(
            address_line1=command.address_line1,
            address_line2=command.address_line2,
            city=command.city,
            state=command.state,
            country=command.country,
            postal_code=command.postal_code,
        )
        with self.transaction_manager.start():
            is_default = command.is_default or self.address_repository.count_by_user(command.user_id) == 0
            address = Address.create(
                command.user_id, postal_address, command.address_type, command.phone, is_default
            )
            if address.is_default:
                self._unset_other_defaults(address)
            self.address_repository.save(address)
            logger.info(f"地址已创建: {address.id} 用户={command.user_id}")
            return AddressDTO.from_domain(address)

    @service_operation("更新地址")
    def update_address(self, command: UpdateAddressCommand) -> AddressDTO:
        postal_address = PostalAddress(
            address_line1=command.address_line1,
            address_line2=command.address_line2,
            city=command.city,
            state=command.state,
            country=command.country,
            postal_code=command.postal_code,
        )
        with self.transaction_manager.start():
            address = self._get_owned_address(command.id, command.user_id)
            address.update(postal_address, command.phone, command.address_type)
            if address.is_default:
                self._unset_other_defaults(address)
            self.address_repository.save(address)
            return AddressDTO.from_domain(address)

    @service_operation("设置默认地址")
    def set_default_address(self, command: SetDefaultAddressCommand) -> AddressDTO:
        with self.transaction_manager.start():
            address = self._get_owned_address(command.id, command.user_id)
            self._unset_other_defaults(address)
            address.set_default(True)
            if address.domain_events:
                self.address_repository.save(address)
            return AddressDTO.from_domain(address)

    @service_operation("删除地址")
    def delete_address(self, command: DeleteAddressCommand) -> None:
        """
        删除地址。删除默认地址后，对它覆盖的每种类型，若已无默认地址，
        则由剩余可用于该类型的地址中最早创建的一个成为默认地址。
        """
        with self.transaction_manager.start():
            address = self._get_owned_address(command.id, command.user_id)
            address.mark_deleted()
            self.address_repository.delete(address)
            if address.is_default:
                self._promote_defaults(address)
            logger.info(f"地址已删除: {address.id}")

    def _promote_defaults(self, removed: Address) -> None:
        remaining = sorted(self.address_repository.get_by_user(removed.user_id), key=lambda a: a.created_at)
        for address_type in (AddressType.SHIPPING, AddressType.BILLING):
            if not removed.serves(address_type):
                continue
            defaults = [a for a in remaining if a.is_default]
            if any(a.serves(address_type) for a in defaults):
                continue
            successor = next(
                (a for a in remaining
                 if a.serves(address_type) and not any(d.overlaps(a.address_type) for d in defaults)),
                None,
            )
            if successor is not None:
                successor.set_default(True)
                self.address_repository.save(successor)

    # ==================== 查询处理方法 ====================

    @service_operation("获取地址")
    def get_address(self, address_id, user_id) -> AddressDTO:
        dto = self._cached(
            f"address:{address_id}",
            lambda: self._load_dto(self.address_repository.get_by_id(address_id)),
            CACHE_TIMEOUT,
        )
        if dto is None or dto.user_id != str(user_id):
            raise EntityNotFoundException("Address", address_id)
        return dto

    @staticmethod
    def _load_dto(address: Optional[Address]) -> Optional[AddressDTO]:
        return AddressDTO.from_domain(address) if address else None

    @service_operation("获取用户地址")
    def get_user_addresses(self, user_id) -> List[AddressDTO]:
        return self._cached(
            f"address:user:{user_id}",
            lambda: [AddressDTO.from_domain(a) for a in self.address_repository.get_by_user(user_id)],
            CACHE_TIMEOUT,
        )

    @service_operation("获取默认地址")
    def get_default_address(self, user_id, address_type: str = AddressType.SHIPPING) -> AddressDTO:
        """
        Raises:
            ValidationException: 地址类型无效
            EntityNotFoundException: 没有该类型的默认地址
        """
        AddressType.validate(address_type)
        address = self.address_repository.get_default(user_id, address_type)
        if address is None:
            raise EntityNotFoundException("Address", f"default:{address_type}")
        return AddressDTO.from_domain(address)
