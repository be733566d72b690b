"""
Settings accessor for the FCM app
"""

from copy import deepcopy

from django.conf import settings

DEFAULTS = {
    'CREDENTIALS': '',
    'PROJECT_ID': '',
    'TOKENS_TABLE': 'fcm_tokens',
    'DEFAULTS': {},
}


def _merge(base, override):
    merged = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_config():
    """Return FIREBASE_MESSAGING settings merged over the built-in defaults"""
    return _merge(DEFAULTS, getattr(settings, 'FIREBASE_MESSAGING', None))


def get_setting(name, default=None):
    return get_config().get(name, default)


def get_platform_defaults():
    """Configured per-platform notification defaults (android, apns)"""
    return get_config().get('DEFAULTS') or {}


def get_app_url():
    return getattr(settings, 'APP_URL', '') or ''
