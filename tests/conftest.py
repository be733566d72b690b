"""Shared pytest fixtures for the Firebase messaging tests."""

from unittest.mock import MagicMock

import pytest

from services.firebase_client import FirebaseMessagingClient
from services.fcm_token_service import FcmTokenServiceInterface


@pytest.fixture
def user_factory():
    """Factory wrapper to create users with sensible defaults."""

    def _create_user(**kwargs):
        from tests.factories import UserFactory

        return UserFactory(**kwargs)

    return _create_user


@pytest.fixture
def fcm_token_factory():
    """Factory wrapper to create device tokens for tests."""

    def _create_token(**kwargs):
        from tests.factories import FcmTokenFactory

        return FcmTokenFactory(**kwargs)

    return _create_token


@pytest.fixture
def messaging_client():
    """A messaging client double that records send calls."""
    client = MagicMock(spec=FirebaseMessagingClient)
    client.send.return_value = 'projects/test-project/messages/1'
    return client


@pytest.fixture
def token_store():
    """A token store double."""
    store = MagicMock(spec=FcmTokenServiceInterface)
    store.delete_tokens.return_value = True
    store.delete_by_token.return_value = True
    return store
