"""
生产环境配置文件。
包含生产环境特定的Django配置。
"""
import os
from .base import *
from .env import *

# 生产环境禁用调试模式
DEBUG = False

# 数据库配置
DATABASES = {
    'default': {
        'ENGINE': DB_ENGINE,
        'NAME': DB_NAME,
        'USER': DB_USER,
        'PASSWORD': DB_PASSWORD,
        'HOST': DB_HOST,
        'PORT': DB_PORT,
        'CONN_MAX_AGE': 60,  # 连接持久化
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
            'SOCKET_TIMEOUT': 5,
            'SOCKET_CONNECT_TIMEOUT': 5,
        },
        'KEY_PREFIX': REDIS_KEY_PREFIX,
        'TIMEOUT': 300,
    }
}

CACHE_SETTINGS = {
    'BACKEND': 'redis',
    'KEY_PREFIX': f'{REDIS_KEY_PREFIX}:',
    'LOCAL_CACHE_SIZE': 1000,
    'LOCAL_CACHE_TTL': 5,
    'DEFAULT_TTL': 300,
}

EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'

# 日志配置 - 生产环境更关注错误和警告
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
            'level': 'WARNING',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose'
        },
        'file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': os.path.join(BASE_DIR, 'logs/django.log'),
            'maxBytes': 10 * 1024 * 1024,  # 10MB
            'backupCount': 10,
            'formatter': 'verbose',
        },
        'error_file': {
            'level': 'ERROR',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': os.path.join(BASE_DIR, 'logs/error.log'),
            'maxBytes': 10 * 1024 * 1024,
            'backupCount': 10,
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file', 'error_file'],
            'level': 'INFO',
            'propagate': True,
        },
        'core': {
            'handlers': ['console', 'file', 'error_file'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
for _app in ('catalog', 'identity', 'shipping', 'sales', 'payments', 'outbox', 'audit'):
    LOGGING['loggers'][_app] = {'handlers': ['console', 'file', 'error_file'], 'level': 'INFO', 'propagate': False}

os.makedirs(os.path.join(BASE_DIR, 'logs'), exist_ok=True)

# 生产环境安全设置
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_HSTS_SECONDS = 31536000  # 1年
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = [
    'rest_framework.throttling.AnonRateThrottle',
    'rest_framework.throttling.UserRateThrottle',
]
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'anon': '1000/hour',
    'user': '10000/hour',
}

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

S3_SETTINGS = {
    'BACKEND': 's3',
    'PROVIDER': S3_PROVIDER,
    'ACCESS_KEY': S3_ACCESS_KEY,
    'SECRET_KEY': S3_SECRET_KEY,
    'REGION': S3_REGION,
    'SERVICE_URL': S3_SERVICE_URL,
    'BUCKET_NAME': S3_BUCKET_NAME,
    'FORCE_PATH_STYLE': S3_FORCE_PATH_STYLE,
}

IDENTITY_SETTINGS['FRONTEND_URL'] = FRONTEND_URL
