"""
Base settings for the Firebase Messaging backend
"""

from pathlib import Path

import dj_database_url
from decouple import config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Security
SECRET_KEY = config('SECRET_KEY', default='your-super-secret-key-here-change-in-production')
DEBUG = config('DEBUG', default=False, cast=bool)
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=lambda v: [s.strip() for s in v.split(',')])

# Public base URL of the application, used as the default notification link
APP_URL = config('APP_URL', default='https://localhost')

# Application definition
DJANGO_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
]

LOCAL_APPS = [
    'apps.fcm',
]

INSTALLED_APPS = DJANGO_APPS + LOCAL_APPS

# Database
DATABASES = {
    'default': dj_database_url.config(
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=config('DB_CONN_MAX_AGE', default=60, cast=int),
    )
}

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Firebase Cloud Messaging
FIREBASE_MESSAGING = {
    # Path to the Firebase service account JSON file
    'CREDENTIALS': config('FIREBASE_CREDENTIALS', default=str(BASE_DIR / 'storage' / 'firebase-credentials.json')),
    'PROJECT_ID': config('FIREBASE_PROJECT_ID', default=''),
    # Database table holding the device tokens
    'TOKENS_TABLE': config('FCM_TOKENS_TABLE', default='fcm_tokens'),
    'DEFAULTS': {
        'android': {
            'ttl': config('FCM_ANDROID_TTL', default='3600s'),
            'priority': config('FCM_ANDROID_PRIORITY', default='normal'),
            'color': config('FCM_ANDROID_COLOR', default='#f45342'),
            'sound': config('FCM_ANDROID_SOUND', default='default'),
        },
        'apns': {
            'priority': config('FCM_APNS_PRIORITY', default='10'),
            'badge': config('FCM_APNS_BADGE', default=42, cast=int),
            'sound': config('FCM_APNS_SOUND', default='default'),
        },
    },
}

# Logging
LOGS_DIR = BASE_DIR / 'logs'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'fcm_file': {
            'level': 'INFO',
            'class': 'core.logging.AutoCreateRotatingFileHandler',
            'filename': LOGS_DIR / 'firebase_messaging.log',
            'maxBytes': 10 * 1024 * 1024,
            'backupCount': 5,
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps.fcm': {
            'handlers': ['console', 'fcm_file'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'services': {
            'handlers': ['console', 'fcm_file'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}
