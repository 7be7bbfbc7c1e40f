"""
支付仓储接口。
"""
from abc import abstractmethod
from typing import Any, List, Optional

from core.domain import Repository
from payments.domain.payment import Payment
from payments.domain.payment_method import PaymentMethod


class PaymentRepository(Repository[Payment]):

    @abstractmethod
    def get_by_order(self, order_id: Any) -> List[Payment]:
        """获取订单的全部支付记录，按创建时间倒序"""
        pass

    @abstractmethod
    def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    def get_succeeded_by_order(self, order_id: Any) -> Optional[Payment]:
        pass


class PaymentMethodRepository(Repository[PaymentMethod]):

    @abstractmethod
    def get_by_user(self, user_id: Any) -> List[PaymentMethod]:
        """获取用户的支付方式，默认支付方式排在最前"""
        pass

    @abstractmethod
    def get_default(self, user_id: Any) -> Optional[PaymentMethod]:
        pass

    @abstractmethod
    def token_exists(self, user_id: Any, token: str) -> bool:
        pass
