from payments.infrastructure.repositories.django_payment_method_repository import DjangoPaymentMethodRepository
from payments.infrastructure.repositories.django_payment_repository import DjangoPaymentRepository

__all__ = ['DjangoPaymentRepository', 'DjangoPaymentMethodRepository']
