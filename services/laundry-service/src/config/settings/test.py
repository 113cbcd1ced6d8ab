# services/laundry-service/src/config/settings/test.py
"""
Test Settings

Django settings for running tests.
"""

from .base import *

# Test mode
DEBUG = False
TESTING = True

# Tests pin "now" in UTC
TIME_ZONE = 'UTC'
CELERY_TIMEZONE = TIME_ZONE

# Use in-memory SQLite for faster tests
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None

MIGRATION_MODULES = DisableMigrations()

# Use local memory cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}

# JWT settings for testing
JWT_SETTINGS = {
    **JWT_SETTINGS,
    'SIGNING_KEY': 'test-secret-key-for-testing-only',
    'VERIFYING_KEY': 'test-secret-key-for-testing-only',
}

LAUNDRY = {
    **LAUNDRY,
    'FORFEIT_UNCLAIMED': True,
    'ANALYTICS_CACHE_SECONDS': 0,
}

# Event backend for testing
EVENT_PUBLISHING_ENABLED = True
EVENT_BACKEND = 'memory'
NOTIFICATION_WEBHOOK_URL = None

# Celery runs tasks inline
CELERY_TASK_ALWAYS_EAGER = True

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
}

CORS_ALLOW_ALL_ORIGINS = True
