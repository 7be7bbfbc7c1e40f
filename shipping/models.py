# 引用基础设施层的模型
from shipping.infrastructure.models.shipping_models import AddressModel
