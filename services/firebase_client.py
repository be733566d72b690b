"""
Firebase Cloud Messaging client built on the Firebase Admin SDK
"""

import logging
from typing import List, Optional, Sequence

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from apps.fcm.conf import get_config
from core.exceptions import MessagingConfigurationError

logger = logging.getLogger(__name__)

# send_each_for_multicast() accepts at most 500 tokens per call
MULTICAST_BATCH_SIZE = 500

INVALID_TOKEN_ERRORS = (exceptions.InvalidArgumentError, messaging.SenderIdMismatchError)
UNKNOWN_TOKEN_ERRORS = (messaging.UnregisteredError, exceptions.NotFoundError)


def get_firebase_app(config: Optional[dict] = None):
    """Return the default Firebase app, initializing it from settings once"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    config = config or get_config()
    credentials_path = config.get('CREDENTIALS')
    if not credentials_path:
        raise MessagingConfigurationError('Firebase credentials path is not configured.')

    options = {}
    if config.get('PROJECT_ID'):
        options['projectId'] = config['PROJECT_ID']

    try:
        certificate = credentials.Certificate(credentials_path)
    except (OSError, ValueError) as e:
        raise MessagingConfigurationError(f"Could not load Firebase credentials from {credentials_path}: {e}") from e

    app = firebase_admin.initialize_app(certificate, options)
    logger.info("Firebase Admin SDK initialized successfully")
    return app


class MulticastSendReport:
    """Per-token outcome of a multicast send"""

    def __init__(self, tokens: Sequence[str], responses: Sequence[messaging.SendResponse]):
        self.items = list(zip(tokens, responses))

    @classmethod
    def from_batch_responses(cls, tokens, batch_responses):
        responses = []
        for batch in batch_responses:
            responses.extend(batch.responses)
        return cls(tokens, responses)

    def successes(self) -> List[str]:
        return [token for token, response in self.items if response.success]

    def failures(self) -> List[str]:
        return [token for token, response in self.items if not response.success]

    def has_failures(self) -> bool:
        return any(not response.success for _, response in self.items)

    @property
    def success_count(self) -> int:
        return len(self.successes())

    @property
    def failure_count(self) -> int:
        return len(self.failures())

    def invalid_tokens(self) -> List[str]:
        """Tokens FCM rejected as malformed or belonging to another sender"""
        return [
            token for token, response in self.items
            if not response.success and isinstance(response.exception, INVALID_TOKEN_ERRORS)
        ]

    def unknown_tokens(self) -> List[str]:
        """Tokens FCM no longer recognizes"""
        return [
            token for token, response in self.items
            if not response.success and isinstance(response.exception, UNKNOWN_TOKEN_ERRORS)
        ]


class FirebaseMessagingClient:
    """Thin wrapper over firebase_admin.messaging bound to one Firebase app"""

    def __init__(self, app=None, batch_size: int = MULTICAST_BATCH_SIZE):
        self._app = app
        self.batch_size = batch_size

    @property
    def app(self):
        if self._app is None:
            self._app = get_firebase_app()
        return self._app

    def send(self, message: messaging.Message) -> str:
        """Send one message and return the FCM message id"""
        return messaging.send(message, app=self.app)

    def send_multicast(self, message, tokens: Sequence[str]) -> MulticastSendReport:
        """
        Send a CloudMessage to every token, in batches of batch_size.

        Returns a MulticastSendReport aligned with the given token order.
        """
        tokens = list(tokens)
        batches = []

        for start in range(0, len(tokens), self.batch_size):
            chunk = tokens[start:start + self.batch_size]
            batches.append(messaging.send_each_for_multicast(message.to_tokens(chunk), app=self.app))

        report = MulticastSendReport.from_batch_responses(tokens, batches)
        logger.info(f"Push notification sent: {report.success_count} succeeded, {report.failure_count} failed")
        return report
