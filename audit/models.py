# 引用基础设施层的模型
from audit.infrastructure.models.audit_models import AuditLogModel
