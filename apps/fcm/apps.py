"""
Django app configuration for Firebase Cloud Messaging
"""

import logging
import os

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class FcmConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.fcm'
    label = 'fcm'
    verbose_name = 'Firebase Cloud Messaging'

    def ready(self):
        """Report missing Firebase credentials once at startup"""
        from apps.fcm.conf import get_config

        config = get_config()
        credentials_path = config.get('CREDENTIALS')

        if not credentials_path:
            logger.warning("FIREBASE_MESSAGING['CREDENTIALS'] is not set, push notifications will fail")
        elif not os.path.exists(credentials_path):
            logger.warning(f"Firebase credentials file not found: {credentials_path}")
        else:
            logger.debug(f"Firebase credentials found for project '{config.get('PROJECT_ID')}'")
