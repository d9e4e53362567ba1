"""
Settings for the test suite.

Everything runs in-process: sqlite, local-memory cache, in-memory channel
layer and eager Celery tasks.
"""

from .settings import *  # noqa: F401,F403

DEBUG = False
ALLOWED_HOSTS = ['*', 'testserver']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'pickleball-tests',
    }
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

JWT_SECRET_KEY = 'test-access-secret'
JWT_REFRESH_SECRET_KEY = 'test-refresh-secret'
ENCRYPTION_KEY = 'test-encryption-key-32-bytes-long'

BYPASS_RAZORPAY = True
RAZORPAY_KEY_ID = 'rzp_test_key'
RAZORPAY_KEY_SECRET = 'rzp_test_secret'
RAZORPAY_WEBHOOK_SECRET = 'rzp_webhook_secret'

RATE_LIMIT_MAX_REQUESTS = 10000
RATE_LIMIT_STRICT_MAX_REQUESTS = 10000
LOGIN_RATE_LIMIT_MAX = 10000

SECURE_HSTS_SECONDS = 0
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {'null': {'class': 'logging.NullHandler'}},
    'root': {'handlers': ['null'], 'level': 'WARNING'},
}
