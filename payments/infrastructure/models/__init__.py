from payments.infrastructure.models.payment_models import PaymentMethodModel, PaymentModel

__all__ = ['PaymentModel', 'PaymentMethodModel']
