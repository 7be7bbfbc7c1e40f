# 引用基础设施层的模型
from outbox.infrastructure.models.outbox_models import OutboxMessageModel
