from identity.infrastructure.models.identity_models import RefreshTokenModel, UserModel

__all__ = [
    'RefreshTokenModel',
    'UserModel',
]
