"""
FCM token storage service
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from apps.fcm.models import FcmToken
from core.logging import mask_token

logger = logging.getLogger(__name__)


class FcmTokenServiceInterface(ABC):
    """Contract for the device token store used by the messaging service"""

    @abstractmethod
    def delete_by_token(self, token: str) -> bool:
        ...

    @abstractmethod
    def delete_tokens(self, tokens: Iterable[str]) -> bool:
        ...

    @abstractmethod
    def get_tokens_for_user(self, user_id: int):
        ...

    @abstractmethod
    def get_all_tokens(self):
        ...


class FcmTokenService(FcmTokenServiceInterface):
    """Token store backed by the FcmToken model"""

    def __init__(self, model=FcmToken):
        self.model = model

    def delete_by_token(self, token: str) -> bool:
        deleted, _ = self.model.objects.filter(fcm_token=token).delete()

        if deleted:
            logger.info(f"Removed invalid push token: {mask_token(token)}")

        return deleted > 0

    def delete_tokens(self, tokens: Iterable[str]) -> bool:
        tokens = list(tokens)
        if not tokens:
            return True

        deleted, _ = self.model.objects.filter(fcm_token__in=tokens).delete()
        logger.info(f"Removed {deleted} of {len(tokens)} invalid push tokens")

        return deleted > 0

    def get_tokens_for_user(self, user_id: int):
        """All tokens registered by a user, oldest first"""
        return self.model.objects.filter(user_id=user_id).order_by('id')

    def get_all_tokens(self):
        return self.model.objects.all()
