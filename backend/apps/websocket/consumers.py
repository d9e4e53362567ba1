"""
WebSocket consumers for live match scores.
"""

import json
import asyncio
import logging
from channels.generic.websocket import AsyncWebsocketConsumer
from channels.db import database_sync_to_async

from .services import build_snapshot, match_group

logger = logging.getLogger(__name__)


class LiveScoreConsumer(AsyncWebsocketConsumer):
    """
    Streams score updates for one match. Watching is public; the user in
    scope (if any) is only used for logging.
    """

    async def connect(self):
        self.match_id = self.scope['url_route']['kwargs']['match_id']
        self.group_name = match_group(self.match_id)
        self.group_joined = False

        snapshot = await self._load_snapshot()
        if snapshot is None:
            await self.close(code=4004)
            return

        await self.accept()
        await self._safe_group_add()

        await self.send(text_data=json.dumps({
            'event': 'snapshot',
            'data': snapshot,
            'realtime': self.group_joined,
        }))

        user = self.scope.get('user') or {}
        logger.info(f'Live score client connected to match {self.match_id} (user {user.get("user_id")})')

    @database_sync_to_async
    def _load_snapshot(self):
        from apps.matches.models import Match

        try:
            match = Match.objects.select_related('player1', 'player2', 'team1', 'team2').get(id=self.match_id)
        except Match.DoesNotExist:
            return None
        return build_snapshot(match)

    async def _safe_group_add(self):
        """Join the match group; without a working channel layer the client can still poll"""
        try:
            if self.channel_layer:
                await asyncio.wait_for(
                    self.channel_layer.group_add(self.group_name, self.channel_name),
                    timeout=5.0
                )
                self.group_joined = True
        except asyncio.TimeoutError:
            logger.warning(f'Channel layer timeout joining {self.group_name}')
        except Exception as e:
            logger.warning(f'Channel layer unavailable joining {self.group_name}: {e}')

    async def disconnect(self, close_code):
        if getattr(self, 'group_joined', False):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
        logger.info(f'Live score client left match {getattr(self, "match_id", "unknown")} ({close_code})')

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '{}')
        except ValueError:
            await self.send(text_data=json.dumps({
                'event': 'error',
                'data': {'message': 'Invalid JSON'}
            }))
            return

        if data.get('event') == 'ping':
            await self.send(text_data=json.dumps({
                'event': 'pong',
                'timestamp': data.get('timestamp')
            }))

    # Event handlers

    async def score_update(self, event):
        """Forward a score_update group event to the client"""
        await self.send(text_data=json.dumps({
            'event': 'score_update',
            'data': event['data']
        }))
