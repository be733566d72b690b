"""
Custom exceptions for the Firebase Messaging backend
"""

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _


class FirebaseMessagingError(Exception):
    """Base exception for all Firebase messaging specific errors"""
    default_detail = 'A Firebase messaging error occurred.'
    default_code = 'firebase_messaging_error'

    def __init__(self, detail=None, code=None):
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.detail)


class MessagingConfigurationError(FirebaseMessagingError):
    """Firebase credentials or project settings are missing"""
    default_detail = 'Firebase messaging is not configured.'
    default_code = 'messaging_not_configured'


class InvalidNotificationError(ValidationError):
    """A notification payload is missing a required field"""

    def __init__(self, field):
        self.field = field
        super().__init__(
            _('Notification %(field)s is required.') % {'field': field},
            code='invalid_notification'
        )
