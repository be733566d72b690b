"""
Testing settings for the Firebase Messaging backend
"""

from .base import *

DEBUG = True

SECRET_KEY = 'test-secret-key'

APP_URL = 'https://app.example.com'

# Lightweight in-memory SQLite for tests
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

FIREBASE_MESSAGING = {
    'CREDENTIALS': '',
    'PROJECT_ID': 'test-project',
    'TOKENS_TABLE': 'fcm_tokens',
    'DEFAULTS': {},
}

# Console-only logging so tests never touch the filesystem
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'WARNING',
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}

# Password hashers for faster tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]
