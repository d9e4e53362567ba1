"""
Fantasy serializers.
"""

from rest_framework import serializers

from apps.tournaments.serializers import PlayerSerializer
from .models import ContestStatus, FantasyContest, FantasyTeam, PrizeDisbursement

CONTEST_FIELD_MAP = {
    'name': 'name',
    'description': 'description',
    'entryFee': 'entry_fee',
    'prizePool': 'prize_pool',
    'maxEntries': 'max_entries',
    'rules': 'rules',
    'prizeBreakdown': 'prize_breakdown',
}


class ContestInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True)
    entryFee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    prizePool = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    maxEntries = serializers.IntegerField(min_value=1, required=False)
    rules = serializers.DictField(required=False)
    prizeBreakdown = serializers.ListField(child=serializers.DictField(), required=False)

    def validate_rules(self, value):
        for key in ('teamSize', 'walletSize', 'maxPlayersToChange'):
            if key in value:
                try:
                    if int(value[key]) < 0:
                        raise ValueError
                except (TypeError, ValueError):
                    raise serializers.ValidationError(f'{key} must be a non-negative integer')
        if 'teamSize' in value and int(value['teamSize']) < 1:
            raise serializers.ValidationError('teamSize must be at least 1')
        return value

    def to_model_fields(self) -> dict:
        return {CONTEST_FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class ContestSerializer(serializers.ModelSerializer):
    tournamentId = serializers.IntegerField(source='tournament_id', read_only=True)
    tournamentName = serializers.CharField(source='tournament.name', read_only=True)
    entryFee = serializers.DecimalField(source='entry_fee', max_digits=10, decimal_places=2)
    prizePool = serializers.DecimalField(source='prize_pool', max_digits=12, decimal_places=2)
    maxEntries = serializers.IntegerField(source='max_entries')
    currentEntries = serializers.IntegerField(source='current_entries')
    prizeBreakdown = serializers.JSONField(source='prize_breakdown')
    isPrizesDistributed = serializers.BooleanField(source='is_prizes_distributed')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = FantasyContest
        fields = [
            'id', 'tournamentId', 'tournamentName', 'name', 'description', 'entryFee',
            'prizePool', 'maxEntries', 'currentEntries', 'status', 'rules',
            'prizeBreakdown', 'isPrizesDistributed', 'createdAt',
        ]


class ContestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ContestStatus.choices)


class TeamSelectionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    playerIds = serializers.ListField(child=serializers.IntegerField(), min_length=1)
    captainId = serializers.IntegerField()
    viceCaptainId = serializers.IntegerField()


class FantasyTeamSerializer(serializers.ModelSerializer):
    contestId = serializers.IntegerField(source='contest_id')
    contestName = serializers.CharField(source='contest.name')
    tournamentId = serializers.IntegerField(source='contest.tournament_id')
    totalPoints = serializers.DecimalField(source='total_points', max_digits=10, decimal_places=2)
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = FantasyTeam
        fields = ['id', 'name', 'contestId', 'contestName', 'tournamentId', 'totalPoints', 'rank', 'createdAt']


class ContestPlayerSerializer(serializers.Serializer):
    player = PlayerSerializer()
    price = serializers.IntegerField()


class PrizeRuleSerializer(serializers.Serializer):
    rank = serializers.IntegerField(min_value=1)
    percentage = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0)
    minPlayers = serializers.IntegerField(min_value=1, required=False, default=1)


class PrizeRulesInputSerializer(serializers.Serializer):
    rules = PrizeRuleSerializer(many=True)
    scope = serializers.ChoiceField(choices=['contest', 'tournament'], default='contest')


class MvpSerializer(serializers.Serializer):
    playerId = serializers.IntegerField()


class DisbursementSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source='user_id')
    teamId = serializers.IntegerField(source='team_id')
    processingFee = serializers.DecimalField(source='processing_fee', max_digits=10, decimal_places=2)
    netAmount = serializers.DecimalField(source='net_amount', max_digits=12, decimal_places=2)

    class Meta:
        model = PrizeDisbursement
        fields = ['id', 'userId', 'teamId', 'rank', 'amount', 'processingFee', 'netAmount', 'status']
