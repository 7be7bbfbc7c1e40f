# 引用基础设施层的模型
from sales.infrastructure.models.sales_models import CartItemModel, CartModel, OrderItemModel, OrderModel
