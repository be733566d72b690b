"""
Device token storage for Firebase Cloud Messaging
"""

from django.conf import settings
from django.db import models

from apps.fcm.conf import get_setting


class FcmToken(models.Model):
    """A Firebase registration token belonging to a user's device"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='fcm_tokens'
    )
    fcm_token = models.CharField(max_length=512, unique=True, verbose_name='FCM Token')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = get_setting('TOKENS_TABLE', 'fcm_tokens')
        verbose_name = 'FCM Token'
        verbose_name_plural = 'FCM Tokens'
        ordering = ['id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='fcm_tokens_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.fcm_token[:20]}"
