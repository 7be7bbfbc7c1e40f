"""
开发环境配置文件。
包含开发环境特定的Django配置。
"""
import os
from .base import *
from .env import *

# 开发环境默认开启调试模式
DEBUG = True

INSTALLED_APPS += ['django.contrib.staticfiles']

# 数据库配置
DATABASES = {
    'default': {
        'ENGINE': DB_ENGINE,
        'NAME': DB_NAME,
        'USER': DB_USER,
        'PASSWORD': DB_PASSWORD,
        'HOST': DB_HOST,
        'PORT': DB_PORT,
    }
}

# Redis缓存配置
CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'PARSER_CLASS': 'redis.connection._HiredisParser',
            'CONNECTION_POOL_KWARGS': {'max_connections': REDIS_MAX_CONNECTIONS},
            'PASSWORD': REDIS_PASSWORD,
        },
        'KEY_PREFIX': REDIS_KEY_PREFIX,
    }
}

CACHE_SETTINGS = {
    'BACKEND': 'redis',
    'KEY_PREFIX': f'{REDIS_KEY_PREFIX}:',
    'LOCAL_CACHE_SIZE': 0,  # 开发环境直接读Redis
    'DEFAULT_TTL': 300,
}

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# 日志配置 - 开发环境更详细的日志
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'DEBUG',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose'
        },
        'file': {
            'level': 'INFO',
            'class': 'logging.FileHandler',
            'filename': os.path.join(BASE_DIR, 'logs/django.log'),
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
            'propagate': True,
        },
        'core': {
            'handlers': ['console', 'file'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}
for _app in ('catalog', 'identity', 'shipping', 'sales', 'payments', 'outbox', 'audit'):
    LOGGING['loggers'][_app] = {'handlers': ['console', 'file'], 'level': 'DEBUG', 'propagate': False}

# 确保日志目录存在
os.makedirs(os.path.join(BASE_DIR, 'logs'), exist_ok=True)

# 开发环境保留可浏览API
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = [
    'rest_framework.renderers.JSONRenderer',
    'rest_framework.renderers.BrowsableAPIRenderer',
]

JWT_SETTINGS = {
    'SECRET': JWT_SECRET,
    'ALGORITHM': 'HS256',
    'ISSUER': JWT_ISSUER,
    'AUDIENCE': JWT_AUDIENCE,
    'ACCESS_TOKEN_LIFETIME_MINUTES': JWT_ACCESS_TOKEN_MINUTES,
    'REFRESH_TOKEN_LIFETIME_DAYS': JWT_REFRESH_TOKEN_DAYS,
}

STRIPE_SETTINGS = {
    'SECRET_KEY': STRIPE_SECRET_KEY,
    'PUBLISHABLE_KEY': STRIPE_PUBLISHABLE_KEY,
    'WEBHOOK_SECRET': STRIPE_WEBHOOK_SECRET,
    'API_VERSION': STRIPE_API_VERSION,
}

# 开发环境默认使用本地MinIO
S3_SETTINGS = {
    'BACKEND': S3_BACKEND,
    'PROVIDER': S3_PROVIDER or 'MinIO',
    'ACCESS_KEY': S3_ACCESS_KEY,
    'SECRET_KEY': S3_SECRET_KEY,
    'REGION': S3_REGION,
    'SERVICE_URL': S3_SERVICE_URL or 'http://localhost:9000',
    'BUCKET_NAME': S3_BUCKET_NAME,
    'FORCE_PATH_STYLE': True,
}

IDENTITY_SETTINGS['FRONTEND_URL'] = FRONTEND_URL
