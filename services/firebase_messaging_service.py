"""
Push notification dispatch service for Firebase Cloud Messaging
"""

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import List, Optional, Union

from django.core.exceptions import ValidationError
from django.utils.functional import SimpleLazyObject
from firebase_admin import exceptions, messaging

from core.exceptions import MessagingConfigurationError
from core.logging import mask_token
from services.fcm_token_service import FcmTokenService, FcmTokenServiceInterface
from services.firebase_client import FirebaseMessagingClient, MulticastSendReport
from services.message_builder import MessageBuilder, build_notification_message

logger = logging.getLogger(__name__)


class DeliveryErrorKind(enum.Enum):
    CONFIGURATION = 'configuration'
    INVALID_PAYLOAD = 'invalid_payload'
    INVALID_TOKEN = 'invalid_token'
    QUOTA_EXCEEDED = 'quota_exceeded'
    UNAVAILABLE = 'unavailable'
    MESSAGING = 'messaging'
    NO_TOKENS = 'no_tokens'
    UNKNOWN = 'unknown'


def classify_error(error: Exception) -> DeliveryErrorKind:
    """Map an exception raised while sending onto a DeliveryErrorKind"""
    if isinstance(error, MessagingConfigurationError):
        return DeliveryErrorKind.CONFIGURATION
    if isinstance(error, (ValidationError, ValueError)):
        return DeliveryErrorKind.INVALID_PAYLOAD
    if isinstance(error, (messaging.UnregisteredError, messaging.SenderIdMismatchError,
                          exceptions.InvalidArgumentError, exceptions.NotFoundError)):
        return DeliveryErrorKind.INVALID_TOKEN
    if isinstance(error, exceptions.ResourceExhaustedError):
        return DeliveryErrorKind.QUOTA_EXCEEDED
    if isinstance(error, (exceptions.UnavailableError, exceptions.DeadlineExceededError,
                          exceptions.InternalError)):
        return DeliveryErrorKind.UNAVAILABLE
    if isinstance(error, exceptions.FirebaseError):
        return DeliveryErrorKind.MESSAGING
    return DeliveryErrorKind.UNKNOWN


@dataclass
class SendResult:
    """
    Outcome of a notify call.

    Truthy exactly when the send succeeded, so callers can keep treating it
    as a boolean while the failure cause stays available.
    """

    success: bool
    error_kind: Optional[DeliveryErrorKind] = None
    error: Optional[Exception] = None
    message_id: Optional[str] = None
    report: Optional[MulticastSendReport] = None

    def __bool__(self):
        return self.success

    @classmethod
    def ok(cls, message_id=None, report=None):
        return cls(success=True, message_id=message_id, report=report)

    @classmethod
    def failed(cls, error_kind, error=None):
        return cls(success=False, error_kind=error_kind, error=error)


class FirebaseMessagingService:
    """Sends push notifications to one or many FCM tokens and prunes dead tokens"""

    def __init__(
        self,
        fcm_service: FcmTokenServiceInterface,
        messaging_client,
        builder: Optional[MessageBuilder] = None
    ):
        self.fcm_service = fcm_service
        self.messaging = messaging_client
        self.builder = builder or MessageBuilder()

    def notify(self, notification: dict, fcm_tokens: Union[str, Iterable]) -> SendResult:
        """
        Send a notification to one or multiple FCM tokens.

        Args:
            notification: Notification data (title, body, link, image, data)
            fcm_tokens: A single token string, or a collection of FcmToken
                records, dicts with an 'fcm_token' key, or token strings

        Returns:
            SendResult, truthy when the notification was sent
        """
        if isinstance(fcm_tokens, str):
            return self.notify_token(notification, fcm_tokens)

        if isinstance(fcm_tokens, Mapping) or hasattr(fcm_tokens, 'fcm_token'):
            fcm_token = self.token_value(fcm_tokens)
            if not fcm_token:
                return SendResult.failed(DeliveryErrorKind.NO_TOKENS)
            return self.notify_token(notification, fcm_token)

        if not isinstance(fcm_tokens, Iterable):
            logger.error(f"Unsupported push notification target: {type(fcm_tokens).__name__}")
            return SendResult.failed(DeliveryErrorKind.NO_TOKENS)

        return self.notify_all(notification, fcm_tokens)

    def notify_token(self, notification: dict, fcm_token: str) -> SendResult:
        """
        Send a notification to a single FCM token.

        Any delivery failure removes the token from storage. Configuration
        failures leave it in place.
        """
        try:
            message = self.builder.build(notification).to_token(fcm_token)
            message_id = self.messaging.send(message)
        except MessagingConfigurationError as e:
            logger.error(f"Push notification to {mask_token(fcm_token)} not sent: {e}")
            return SendResult.failed(DeliveryErrorKind.CONFIGURATION, e)
        except Exception as e:
            logger.warning(f"Push notification to {mask_token(fcm_token)} failed: {e}")
            self.fcm_service.delete_by_token(fcm_token)
            return SendResult.failed(classify_error(e), e)

        logger.info(f"Push notification sent to {mask_token(fcm_token)}")
        return SendResult.ok(message_id=message_id)

    def notify_all(self, notification: dict, fcm_tokens: Iterable) -> SendResult:
        """
        Send a notification to multiple FCM tokens.

        Tokens reported as invalid or unknown are removed after the send.
        """
        tokens = self.extract_tokens(fcm_tokens)

        if not tokens:
            logger.info("No push tokens to notify")
            return SendResult.failed(DeliveryErrorKind.NO_TOKENS)

        try:
            message = self.builder.build(notification)
            report = self.messaging.send_multicast(message, tokens)

            self.clean_up_invalid_tokens(report)
        except Exception as e:
            logger.error(f"Multicast push notification to {len(tokens)} tokens failed: {e}")
            return SendResult.failed(classify_error(e), e)

        return SendResult.ok(report=report)

    def build_notification_message(self, title: str, body: str, attributes: Optional[dict] = None) -> dict:
        return build_notification_message(title, body, attributes, app_url=self.builder.app_url)

    def clean_up_invalid_tokens(self, report: MulticastSendReport) -> bool:
        """Delete tokens the multicast report flagged as invalid or unknown"""
        invalid_tokens = list(report.invalid_tokens()) + list(report.unknown_tokens())

        return self.fcm_service.delete_tokens(invalid_tokens)

    @staticmethod
    def token_value(item) -> Optional[str]:
        """Token string of a plain string, a mapping or an FcmToken-like record"""
        if isinstance(item, str):
            return item
        if isinstance(item, Mapping):
            return item.get('fcm_token')
        return getattr(item, 'fcm_token', None)

    @classmethod
    def extract_tokens(cls, fcm_tokens: Iterable) -> List[str]:
        """Pull non-empty token strings out of records, dicts or strings"""
        tokens = []
        for item in fcm_tokens or []:
            value = cls.token_value(item)
            if value:
                tokens.append(value)

        return tokens


def get_messaging_service() -> FirebaseMessagingService:
    """Build the service wired to the ORM token store and the Firebase client"""
    return FirebaseMessagingService(FcmTokenService(), FirebaseMessagingClient())


# Process-wide service instance, built on first use
firebase_messaging = SimpleLazyObject(get_messaging_service)
