"""
测试环境配置文件。
包含测试环境特定的Django配置。
"""
from .base import *
from .env import *

# 测试环境禁用调试模式
DEBUG = False

# 使用内存数据库加速测试
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.dummy.DummyCache',
    }
}

CACHE_SETTINGS = {
    'BACKEND': 'memory',
    'MAX_SIZE': 1000,
    'DEFAULT_TTL': 300,
}

# 测试中事件在仓储保存时立即发布
DOMAIN_EVENTS = {
    'DISPATCHER': 'core.infrastructure.events.ImmediateDomainEventDispatcher',
}

# 降低密码哈希成本加速测试
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

# 简化日志配置
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'console': {
            'level': 'ERROR',
            'class': 'logging.StreamHandler',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'ERROR',
            'propagate': False,
        },
    },
}

REST_FRAMEWORK['TEST_REQUEST_DEFAULT_FORMAT'] = 'json'

JWT_SETTINGS = {
    'SECRET': 'test-jwt-secret-key-with-enough-length-for-hs256',
    'ALGORITHM': 'HS256',
    'ISSUER': 'shopilent-test',
    'AUDIENCE': 'shopilent-test-clients',
    'ACCESS_TOKEN_LIFETIME_MINUTES': 15,
    'REFRESH_TOKEN_LIFETIME_DAYS': 7,
}

STRIPE_SETTINGS = {
    'SECRET_KEY': 'sk_test_dummy',
    'PUBLISHABLE_KEY': 'pk_test_dummy',
    'WEBHOOK_SECRET': '',
    'API_VERSION': '',
}

S3_SETTINGS = {
    'BACKEND': 'local',
    'PROVIDER': 'AWS',
    'BUCKET_NAME': 'shopilent-test',
    'REGION': 'us-east-1',
}

IDENTITY_SETTINGS['FRONTEND_URL'] = 'http://testserver'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
