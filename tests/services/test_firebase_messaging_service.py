"""Tests for routing, sending and token cleanup in the messaging service."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import exceptions, messaging

from apps.fcm.models import FcmToken
from services.fcm_token_service import FcmTokenService
from services.firebase_client import FirebaseMessagingClient, MulticastSendReport
from services.firebase_messaging_service import (
    DeliveryErrorKind,
    FirebaseMessagingService,
    SendResult,
    classify_error,
)
from services.message_builder import MessageBuilder

PAYLOAD = {'title': 'Match starts', 'body': 'Kick-off in 10 minutes'}


def make_report(outcomes):
    tokens = [token for token, _ in outcomes]
    responses = [
        messaging.SendResponse({'name': 'projects/p/messages/1'}, None) if error is None
        else messaging.SendResponse(None, error)
        for _, error in outcomes
    ]
    return MulticastSendReport(tokens, responses)


@pytest.fixture
def service(token_store, messaging_client):
    builder = MessageBuilder(defaults={}, app_url='https://app.example.com')
    return FirebaseMessagingService(token_store, messaging_client, builder=builder)


def test_single_token_routes_to_send(service, messaging_client):
    result = service.notify(PAYLOAD, 'token-a')

    assert result
    assert result.message_id == 'projects/test-project/messages/1'
    messaging_client.send.assert_called_once()
    messaging_client.send_multicast.assert_not_called()
    sent = messaging_client.send.call_args.args[0]
    assert isinstance(sent, messaging.Message)
    assert sent.token == 'token-a'


def test_collection_routes_to_multicast(service, messaging_client):
    messaging_client.send_multicast.return_value = make_report([('token-a', None), ('token-b', None)])

    result = service.notify(PAYLOAD, [{'fcm_token': 'token-a'}, {'fcm_token': 'token-b'}])

    assert result
    messaging_client.send.assert_not_called()
    messaging_client.send_multicast.assert_called_once()
    assert messaging_client.send_multicast.call_args.args[1] == ['token-a', 'token-b']


def test_single_send_failure_deletes_token(service, messaging_client, token_store):
    messaging_client.send.side_effect = messaging.UnregisteredError('Requested entity was not found.')

    result = service.notify_token(PAYLOAD, 'token-a')

    assert not result
    assert result.error_kind is DeliveryErrorKind.INVALID_TOKEN
    token_store.delete_by_token.assert_called_once_with('token-a')


def test_single_send_failure_on_network_error_still_deletes_token(service, messaging_client, token_store):
    messaging_client.send.side_effect = ConnectionError('connection reset')

    result = service.notify(PAYLOAD, 'token-a')

    assert result == SendResult(success=False, error_kind=DeliveryErrorKind.UNKNOWN, error=result.error)
    assert isinstance(result.error, ConnectionError)
    token_store.delete_by_token.assert_called_once_with('token-a')


def test_single_send_with_invalid_payload_fails_without_raising(service, messaging_client, token_store):
    result = service.notify({'title': 'No body'}, 'token-a')

    assert not result
    assert result.error_kind is DeliveryErrorKind.INVALID_PAYLOAD
    messaging_client.send.assert_not_called()
    token_store.delete_by_token.assert_called_once_with('token-a')


def test_multicast_without_tokens_skips_client(service, messaging_client):
    result = service.notify(PAYLOAD, [{'fcm_token': ''}, {'fcm_token': None}, ''])

    assert not result
    assert result.error_kind is DeliveryErrorKind.NO_TOKENS
    messaging_client.send_multicast.assert_not_called()


def test_multicast_with_empty_collection_skips_client(service, messaging_client):
    assert not service.notify(PAYLOAD, [])
    messaging_client.send_multicast.assert_not_called()


def test_multicast_deletes_invalid_and_unknown_tokens_in_one_call(service, messaging_client, token_store):
    report = make_report([
        ('t1', exceptions.InvalidArgumentError('The registration token is not valid')),
        ('t2', messaging.UnregisteredError('Requested entity was not found.')),
        ('t3', None),
        ('t4', exceptions.UnavailableError('Try again later')),
    ])
    messaging_client.send_multicast.return_value = report

    result = service.notify(PAYLOAD, ['t1', 't2', 't3', 't4'])

    assert result
    assert result.report is report
    token_store.delete_tokens.assert_called_once_with(['t1', 't2'])


def test_multicast_exception_returns_failure_without_cleanup(service, messaging_client, token_store):
    messaging_client.send_multicast.side_effect = exceptions.UnavailableError('Service unavailable')

    result = service.notify(PAYLOAD, ['t1', 't2'])

    assert not result
    assert result.error_kind is DeliveryErrorKind.UNAVAILABLE
    token_store.delete_tokens.assert_not_called()


def test_multicast_cleanup_failure_reports_failure(service, messaging_client, token_store):
    messaging_client.send_multicast.return_value = make_report([('t1', messaging.UnregisteredError('gone'))])
    token_store.delete_tokens.side_effect = RuntimeError('database is locked')

    result = service.notify(PAYLOAD, ['t1'])

    assert not result
    assert result.error_kind is DeliveryErrorKind.UNKNOWN
    token_store.delete_tokens.assert_called_once_with(['t1'])


def test_build_notification_message_uses_builder_app_url(service):
    message = service.build_notification_message('Hi', 'There', {'image': 'img.png'})

    assert message == {'title': 'Hi', 'body': 'There', 'link': 'https://app.example.com', 'image': 'img.png'}


@pytest.mark.parametrize('error, kind', [
    (exceptions.ResourceExhaustedError('quota'), DeliveryErrorKind.QUOTA_EXCEEDED),
    (messaging.QuotaExceededError('quota'), DeliveryErrorKind.QUOTA_EXCEEDED),
    (messaging.SenderIdMismatchError('mismatch'), DeliveryErrorKind.INVALID_TOKEN),
    (exceptions.DeadlineExceededError('slow'), DeliveryErrorKind.UNAVAILABLE),
    (messaging.ThirdPartyAuthError('apns cert'), DeliveryErrorKind.MESSAGING),
    (ValueError('bad link'), DeliveryErrorKind.INVALID_PAYLOAD),
    (RuntimeError('boom'), DeliveryErrorKind.UNKNOWN),
])
def test_classify_error(error, kind):
    assert classify_error(error) is kind


@pytest.mark.django_db
def test_multicast_with_token_records_prunes_database(fcm_token_factory, user_factory, messaging_client):
    user = user_factory()
    fcm_token_factory(user=user, fcm_token='live')
    fcm_token_factory(user=user, fcm_token='dead')
    messaging_client.send_multicast.return_value = make_report([
        ('live', None),
        ('dead', messaging.UnregisteredError('gone')),
    ])
    token_service = FcmTokenService()
    service = FirebaseMessagingService(
        token_service,
        messaging_client,
        builder=MessageBuilder(defaults={}, app_url='https://app.example.com'),
    )

    result = service.notify(PAYLOAD, token_service.get_tokens_for_user(user.id))

    assert result
    assert messaging_client.send_multicast.call_args.args[1] == ['live', 'dead']
    assert list(FcmToken.objects.values_list('fcm_token', flat=True)) == ['live']


@pytest.mark.django_db
def test_single_send_failure_prunes_database(fcm_token_factory, messaging_client):
    fcm_token_factory(fcm_token='stale')
    messaging_client.send.side_effect = exceptions.NotFoundError('not found')
    service = FirebaseMessagingService(FcmTokenService(), messaging_client, builder=MagicMock())

    assert not service.notify(PAYLOAD, 'stale')
    assert not FcmToken.objects.filter(fcm_token='stale').exists()


def test_single_mapping_target_routes_to_send(service, messaging_client):
    result = service.notify(PAYLOAD, {'fcm_token': 'token-a', 'user_id': 3})

    assert result
    messaging_client.send_multicast.assert_not_called()
    assert messaging_client.send.call_args.args[0].token == 'token-a'


def test_single_record_target_routes_to_send(service, messaging_client):
    result = service.notify(PAYLOAD, SimpleNamespace(fcm_token='token-b', user_id=3))

    assert result
    messaging_client.send_multicast.assert_not_called()
    assert messaging_client.send.call_args.args[0].token == 'token-b'


def test_single_record_without_token_fails_without_sending(service, messaging_client, token_store):
    result = service.notify(PAYLOAD, {'fcm_token': ''})

    assert not result
    assert result.error_kind is DeliveryErrorKind.NO_TOKENS
    messaging_client.send.assert_not_called()
    token_store.delete_by_token.assert_not_called()


def test_unsupported_target_fails_without_raising(service, messaging_client):
    result = service.notify(PAYLOAD, 42)

    assert not result
    assert result.error_kind is DeliveryErrorKind.NO_TOKENS
    messaging_client.send.assert_not_called()
    messaging_client.send_multicast.assert_not_called()


@pytest.mark.django_db
@pytest.mark.parametrize('credentials_path', ['', '/nonexistent/service-account.json'])
@patch('services.firebase_client.firebase_admin.get_app', side_effect=ValueError)
def test_misconfigured_firebase_keeps_tokens(get_app_mock, credentials_path, settings, fcm_token_factory):
    settings.FIREBASE_MESSAGING = {'CREDENTIALS': credentials_path, 'PROJECT_ID': 'test-project'}
    fcm_token_factory(fcm_token='valid-device')
    service = FirebaseMessagingService(
        FcmTokenService(),
        FirebaseMessagingClient(),
        builder=MessageBuilder(defaults={}, app_url='https://app.example.com'),
    )

    single = service.notify(PAYLOAD, 'valid-device')
    multicast = service.notify(PAYLOAD, ['valid-device'])

    assert not single
    assert single.error_kind is DeliveryErrorKind.CONFIGURATION
    assert not multicast
    assert multicast.error_kind is DeliveryErrorKind.CONFIGURATION
    assert FcmToken.objects.filter(fcm_token='valid-device').exists()
