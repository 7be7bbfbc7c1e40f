# 引用基础设施层的模型
from payments.infrastructure.models.payment_models import PaymentMethodModel, PaymentModel
