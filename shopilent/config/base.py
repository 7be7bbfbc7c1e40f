"""
基础配置文件。
各环境共享的Django配置。
"""
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'catalog.apps.CatalogConfig',
    'identity.apps.IdentityConfig',
    'shipping.apps.ShippingConfig',
    'sales.apps.SalesConfig',
    'payments.apps.PaymentsConfig',
    'outbox.apps.OutboxConfig',
    'audit.apps.AuditConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'shopilent.urls'
WSGI_APPLICATION = 'shopilent.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {'context_processors': []},
    },
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher',
]

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'identity.infrastructure.authentication.JWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.MultiPartParser',
        'rest_framework.parsers.FormParser',
    ],
    'EXCEPTION_HANDLER': 'core.infrastructure.exception_handler.unified_exception_handler',
}

# 领域事件经发件箱分发
DOMAIN_EVENTS = {
    'DISPATCHER': 'outbox.infrastructure.dispatcher.OutboxDomainEventDispatcher',
}

OUTBOX_SETTINGS = {
    'PROCESSING_INTERVAL_MILLISECONDS': 5000,
    'BATCH_SIZE': 50,
    'MAX_RETRY_ATTEMPTS': 5,
    'DAYS_TO_KEEP_PROCESSED_MESSAGES': 7,
    'CLEANUP_INTERVAL_HOURS': 24,
}

CATALOG_SETTINGS = {
    'CACHE_TIMEOUT': 3600,
    'SEARCH_CACHE_TIMEOUT': 300,
    'IMAGE_PREFIX': 'products',
    'MAX_IMAGE_SIZE': 5 * 1024 * 1024,
    'ALLOWED_IMAGE_TYPES': ['image/jpeg', 'image/png', 'image/webp', 'image/gif'],
}

SALES_SETTINGS = {
    'TAX_RATE': '0.08',
    'SHIPPING_COSTS': {
        'standard': '5.00',
        'express': '15.00',
        'overnight': '25.00',
    },
    'CURRENCY': 'USD',
    'CACHE_TIMEOUT': 600,
}

IDENTITY_SETTINGS = {
    'MAX_FAILED_LOGIN_ATTEMPTS': 5,
    'EMAIL_VERIFICATION_HOURS': 24,
    'PASSWORD_RESET_HOURS': 1,
    'CACHE_TIMEOUT': 900,
}
