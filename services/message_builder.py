"""
Builds Firebase Cloud Messaging messages from plain notification payloads
"""

import warnings
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterable, Optional

from firebase_admin import messaging

from apps.fcm.conf import get_app_url, get_platform_defaults
from core.exceptions import InvalidNotificationError

REQUIRED_FIELDS = ('title', 'body')

ANDROID_BASE_DEFAULTS = {
    'ttl': '3600s',
    'priority': 'normal',
    'color': '#f45342',
    'sound': 'default',
}

APNS_BASE_DEFAULTS = {
    'priority': '10',
    'badge': 42,
    'sound': 'default',
}


def parse_ttl(value) -> Optional[timedelta]:
    """
    Convert an Android TTL setting into a timedelta.

    Accepts durations such as '3600s' or '3600', plain numbers of seconds,
    or a timedelta.
    """
    if value is None or value == '':
        return None
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip()
    if text.endswith('s'):
        text = text[:-1]
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        raise ValueError(f"Invalid Android TTL: {value!r}")


@contextmanager
def registration_token_target():
    """
    Silence the SDK deprecation of token targets.

    Stored values are FCM registration tokens, which firebase-admin still
    delivers through Message.token and MulticastMessage.tokens.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        yield


@dataclass
class CloudMessage:
    """Target-less message; addressed later with to_token() or to_tokens()"""

    notification: messaging.Notification
    data: Dict[str, str] = field(default_factory=dict)
    webpush: Optional[messaging.WebpushConfig] = None
    android: Optional[messaging.AndroidConfig] = None
    apns: Optional[messaging.APNSConfig] = None

    def to_token(self, token: str) -> messaging.Message:
        with registration_token_target():
            return messaging.Message(
                token=token,
                notification=self.notification,
                data=self.data or None,
                webpush=self.webpush,
                android=self.android,
                apns=self.apns,
            )

    def to_tokens(self, tokens: Iterable[str]) -> messaging.MulticastMessage:
        with registration_token_target():
            return messaging.MulticastMessage(
                tokens=list(tokens),
                notification=self.notification,
                data=self.data or None,
                webpush=self.webpush,
                android=self.android,
                apns=self.apns,
            )


class MessageBuilder:
    """
    Turns a notification payload into a CloudMessage.

    Platform blocks merge hard-coded baseline values with the configured
    defaults; configured values win. Only the title and body of a payload
    reach the Android and APNs blocks.
    """

    def __init__(self, defaults: Optional[dict] = None, app_url: Optional[str] = None):
        self.defaults = get_platform_defaults() if defaults is None else defaults
        self.app_url = get_app_url() if app_url is None else app_url

    def build(self, notification: dict) -> CloudMessage:
        return CloudMessage(
            notification=self.build_notification(notification),
            data=self.get_notification_data(notification),
            webpush=self.get_webpush_config(notification),
            android=self.get_android_config(notification),
            apns=self.get_apns_config(notification),
        )

    def validate(self, notification: dict):
        for required in REQUIRED_FIELDS:
            if not notification.get(required):
                raise InvalidNotificationError(required)

    def build_notification(self, notification: dict) -> messaging.Notification:
        self.validate(notification)

        return messaging.Notification(
            title=notification['title'],
            body=notification['body'],
            image=notification.get('image') or None,
        )

    def get_notification_data(self, notification: dict) -> Dict[str, str]:
        data = notification.get('data') or {}
        # FCM data payloads only carry string values
        return {str(key): str(value) for key, value in data.items()}

    def get_webpush_config(self, notification: dict) -> messaging.WebpushConfig:
        return messaging.WebpushConfig(
            notification=messaging.WebpushNotification(
                title=notification.get('title'),
                body=notification.get('body'),
            ),
            fcm_options=messaging.WebpushFCMOptions(
                link=notification.get('link') or self.app_url,
            ),
        )

    def resolve_android_defaults(self) -> dict:
        return {**ANDROID_BASE_DEFAULTS, **(self.defaults.get('android') or {})}

    def resolve_apns_defaults(self) -> dict:
        return {**APNS_BASE_DEFAULTS, **(self.defaults.get('apns') or {})}

    def get_android_config(self, notification: dict) -> messaging.AndroidConfig:
        defaults = self.resolve_android_defaults()

        return messaging.AndroidConfig(
            ttl=parse_ttl(defaults['ttl']),
            priority=defaults['priority'],
            notification=messaging.AndroidNotification(
                title=notification['title'],
                body=notification['body'],
                color=defaults['color'],
                sound=defaults['sound'],
            ),
        )

    def get_apns_config(self, notification: dict) -> messaging.APNSConfig:
        defaults = self.resolve_apns_defaults()

        return messaging.APNSConfig(
            headers={'apns-priority': str(defaults['priority'])},
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    alert=messaging.ApsAlert(
                        title=notification['title'],
                        body=notification['body'],
                    ),
                    badge=defaults['badge'],
                    sound=defaults['sound'],
                    mutable_content=True,
                ),
            ),
        )


def build_notification_message(title: str, body: str, attributes: Optional[dict] = None, app_url: Optional[str] = None) -> dict:
    """
    Assemble a notification payload from a title, body and optional attributes.

    Only 'link', 'image' and a non-empty 'data' mapping are taken from the
    attributes; 'link' falls back to the application URL.
    """
    attributes = attributes or {}
    app_url = get_app_url() if app_url is None else app_url

    message = {
        'title': title,
        'body': body,
        'link': attributes.get('link', app_url),
    }

    if 'image' in attributes:
        message['image'] = attributes['image']

    if attributes.get('data'):
        message['data'] = attributes['data']

    return message
