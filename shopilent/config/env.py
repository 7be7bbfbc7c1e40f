"""
环境变量处理模块。
负责加载和处理环境变量。
"""
import os
import warnings
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv


# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent.parent


def load_env_file() -> bool:
    """
    加载.env文件。
    依次查找项目根目录和配置目录，已存在的环境变量不会被覆盖。
    """
    for env_path in (BASE_DIR / '.env', Path(__file__).resolve().parent / '.env'):
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, encoding='utf-8')
            return True
    return False


load_env_file()


def get_env(name: str, default: Any = None, cast_type: Optional[type] = None) -> Any:
    """
    获取环境变量值，支持类型转换和默认值

    Args:
        name: 环境变量名称
        default: 默认值，如果环境变量不存在则返回此值
        cast_type: 类型转换函数，如int, float, bool, list等

    Returns:
        环境变量的值，经过类型转换（如果指定了cast_type）
    """
    value = os.environ.get(name, default)

    if value is None:
        return None

    if cast_type is not None:
        if cast_type is bool and isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'y')
        if cast_type is list and isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        try:
            return cast_type(value)
        except (ValueError, TypeError):
            warnings.warn(f"无法将环境变量{name}的值'{value}'转换为{cast_type.__name__}类型，使用默认值")
            return default

    return value


DEBUG = get_env('DEBUG', default=True, cast_type=bool)
SECRET_KEY = get_env('SECRET_KEY', default='django-insecure-shopilent-local-development-key')
ALLOWED_HOSTS = get_env('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast_type=list)
APP_VERSION = get_env('APP_VERSION', default='1.0.0')

# 数据库配置
DB_ENGINE = get_env('DB_ENGINE', default='django.db.backends.postgresql')
DB_NAME = get_env('DB_NAME', default='shopilent')
DB_USER = get_env('DB_USER', default='postgres')
DB_PASSWORD = get_env('DB_PASSWORD', default='postgres')
DB_HOST = get_env('DB_HOST', default='127.0.0.1')
DB_PORT = get_env('DB_PORT', default='5432')

# Redis配置
REDIS_URL = get_env('REDIS_URL', default='redis://localhost:6379/1')
REDIS_PASSWORD = get_env('REDIS_PASSWORD', default='')
REDIS_MAX_CONNECTIONS = get_env('REDIS_MAX_CONNECTIONS', default=100, cast_type=int)
REDIS_KEY_PREFIX = get_env('REDIS_KEY_PREFIX', default='shopilent')

# JWT配置
JWT_SECRET = get_env('JWT_SECRET', default=SECRET_KEY)
JWT_ISSUER = get_env('JWT_ISSUER', default='shopilent')
JWT_AUDIENCE = get_env('JWT_AUDIENCE', default='shopilent-clients')
JWT_ACCESS_TOKEN_MINUTES = get_env('JWT_ACCESS_TOKEN_MINUTES', default=60, cast_type=int)
JWT_REFRESH_TOKEN_DAYS = get_env('JWT_REFRESH_TOKEN_DAYS', default=7, cast_type=int)

# Stripe配置
STRIPE_SECRET_KEY = get_env('STRIPE_SECRET_KEY', default='')
STRIPE_PUBLISHABLE_KEY = get_env('STRIPE_PUBLISHABLE_KEY', default='')
STRIPE_WEBHOOK_SECRET = get_env('STRIPE_WEBHOOK_SECRET', default='')
STRIPE_API_VERSION = get_env('STRIPE_API_VERSION', default='')

# 对象存储配置
S3_BACKEND = get_env('S3_BACKEND', default='s3')
S3_PROVIDER = get_env('S3_PROVIDER', default='AWS')
S3_ACCESS_KEY = get_env('S3_ACCESS_KEY', default='')
S3_SECRET_KEY = get_env('S3_SECRET_KEY', default='')
S3_REGION = get_env('S3_REGION', default='us-east-1')
S3_SERVICE_URL = get_env('S3_SERVICE_URL', default='')
S3_BUCKET_NAME = get_env('S3_BUCKET_NAME', default='shopilent')
S3_FORCE_PATH_STYLE = get_env('S3_FORCE_PATH_STYLE', default=False, cast_type=bool)

# 邮件配置
EMAIL_HOST = get_env('EMAIL_HOST', default='localhost')
EMAIL_PORT = get_env('EMAIL_PORT', default=25, cast_type=int)
EMAIL_HOST_USER = get_env('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = get_env('EMAIL_HOST_PASSWORD', default='')
EMAIL_USE_TLS = get_env('EMAIL_USE_TLS', default=False, cast_type=bool)
DEFAULT_FROM_EMAIL = get_env('DEFAULT_FROM_EMAIL', default='no-reply@shopilent.local')
FRONTEND_URL = get_env('FRONTEND_URL', default='http://localhost:3000')
