"""
Live score broadcasting over the channel layer.
"""

import logging
from typing import Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def match_group(match_id) -> str:
    return f'match_{match_id}'


def build_snapshot(match) -> Dict:
    """Current state of a match as sent to live score clients"""
    return {
        'matchId': match.id,
        'tournamentId': match.tournament_id,
        'round': match.round,
        'status': match.status,
        'isDoubles': match.is_doubles,
        'side1': {'name': match.side_name(1), 'score': match.player1_score},
        'side2': {'name': match.side_name(2), 'score': match.player2_score},
        'currentSet': match.current_set,
        'sets': match.sets,
        'maxScore': match.max_score,
        'isGoldenPoint': match.is_golden_point,
        'setScores': [
            {'setNumber': s.set_number, 'team1Score': s.team1_score, 'team2Score': s.team2_score}
            for s in match.set_scores.all()
        ],
        'winnerSide': match.winner_side,
        'updatedAt': match.updated_at.isoformat() if match.updated_at else None,
    }


class LiveScoreService:
    """
    Pushes score_update events to everyone watching a match
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def broadcast_score(self, match) -> bool:
        """
        Send the match snapshot to its group.

        Returns:
            False when the channel layer is missing or the send failed
        """
        if not self.channel_layer:
            logger.warning('Channel layer not configured, skipping live score broadcast')
            return False

        try:
            async_to_sync(self.channel_layer.group_send)(
                match_group(match.id),
                {
                    'type': 'score_update',
                    'data': build_snapshot(match),
                },
            )
        except Exception as e:
            logger.error(f'Live score broadcast for match {match.id} failed: {e}', exc_info=True)
            return False

        logger.debug(f'Broadcast score for match {match.id}')
        return True


# Create singleton instance
live_score_service = LiveScoreService()
