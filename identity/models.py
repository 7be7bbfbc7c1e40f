# 引用基础设施层的模型
from identity.infrastructure.models.identity_models import RefreshTokenModel, UserModel
