"""
Tests for the live score WebSocket and its broadcaster.
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from apps.authentication.services import auth_service
from apps.websocket.middleware import JWTAuthMiddleware
from apps.websocket.routing import websocket_urlpatterns
from apps.websocket.services import LiveScoreService, build_snapshot, match_group
from tests.factories import MatchFactory

application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


class RecordingLayer:

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def group_send(self, group, message):
        if self.fail:
            raise ConnectionError('redis is down')
        self.sent.append((group, message))


@pytest.fixture
def match(tournament):
    return MatchFactory(tournament=tournament)


@pytest.mark.django_db(transaction=True)
class TestLiveScoreConsumer:

    def test_snapshot_on_connect(self, match):
        async def run():
            communicator = WebsocketCommunicator(application, f'/ws/matches/{match.id}/')
            connected, _ = await communicator.connect()
            assert connected

            message = await communicator.receive_json_from()
            await communicator.disconnect()
            return message

        message = async_to_sync(run)()
        assert message['event'] == 'snapshot'
        assert message['realtime'] is True
        assert message['data']['matchId'] == match.id
        assert message['data']['side1']['score'] == 0

    def test_unknown_match_is_closed(self):
        async def run():
            communicator = WebsocketCommunicator(application, '/ws/matches/999999/')
            return await communicator.connect()

        connected, code = async_to_sync(run)()
        assert not connected
        assert code == 4004

    def test_ping_pong(self, match):
        async def run():
            communicator = WebsocketCommunicator(application, f'/ws/matches/{match.id}/')
            await communicator.connect()
            await communicator.receive_json_from()

            await communicator.send_json_to({'event': 'ping', 'timestamp': 1700000000})
            reply = await communicator.receive_json_from()
            await communicator.disconnect()
            return reply

        assert async_to_sync(run)() == {'event': 'pong', 'timestamp': 1700000000}

    def test_group_updates_are_forwarded(self, match):
        async def run():
            communicator = WebsocketCommunicator(application, f'/ws/matches/{match.id}/')
            await communicator.connect()
            await communicator.receive_json_from()

            await get_channel_layer().group_send(match_group(match.id), {
                'type': 'score_update',
                'data': {'matchId': match.id, 'side1': {'score': 5}},
            })
            update = await communicator.receive_json_from()
            await communicator.disconnect()
            return update

        update = async_to_sync(run)()
        assert update == {'event': 'score_update', 'data': {'matchId': match.id, 'side1': {'score': 5}}}


class TestJWTAuthMiddleware:

    def call(self, query_string):
        captured = {}

        async def inner(scope, receive, send):
            captured.update(scope)

        async_to_sync(JWTAuthMiddleware(inner))(
            {'type': 'websocket', 'query_string': query_string}, None, None
        )
        return captured['user']

    @pytest.mark.django_db
    def test_valid_token_sets_user(self, user):
        token = auth_service.generate_tokens(user)['accessToken']
        scope_user = self.call(f'token={token}'.encode())
        assert scope_user['user_id'] == str(user.id)
        assert scope_user['is_authenticated'] is True

    def test_bad_or_missing_token_is_anonymous(self):
        assert self.call(b'token=garbage') is None
        assert self.call(b'') is None


@pytest.mark.django_db
class TestBroadcast:

    def test_broadcast_sends_snapshot_to_group(self, match):
        layer = RecordingLayer()
        assert LiveScoreService(channel_layer=layer).broadcast_score(match) is True

        group, message = layer.sent[0]
        assert group == f'match_{match.id}'
        assert message == {'type': 'score_update', 'data': build_snapshot(match)}

    def test_broadcast_failure_returns_false(self, match):
        assert LiveScoreService(channel_layer=RecordingLayer(fail=True)).broadcast_score(match) is False
