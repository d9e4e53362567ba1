"""
Match serializers.
"""

from rest_framework import serializers

from .models import Match, MatchPerformance, SetScore


class SetScoreSerializer(serializers.ModelSerializer):
    setNumber = serializers.IntegerField(source='set_number')
    team1Score = serializers.IntegerField(source='team1_score')
    team2Score = serializers.IntegerField(source='team2_score')

    class Meta:
        model = SetScore
        fields = ['setNumber', 'team1Score', 'team2Score']


class MatchSerializer(serializers.ModelSerializer):
    tournamentId = serializers.IntegerField(source='tournament_id', read_only=True)
    courtNumber = serializers.IntegerField(source='court_number', read_only=True)
    scheduledTime = serializers.DateTimeField(source='scheduled_time', read_only=True)
    refereeId = serializers.UUIDField(source='referee_id', read_only=True)
    isDoubles = serializers.BooleanField(source='is_doubles', read_only=True)
    side1 = serializers.SerializerMethodField()
    side2 = serializers.SerializerMethodField()
    currentSet = serializers.IntegerField(source='current_set', read_only=True)
    maxScore = serializers.IntegerField(source='max_score', read_only=True)
    isGoldenPoint = serializers.BooleanField(source='is_golden_point', read_only=True)
    winnerSide = serializers.IntegerField(source='winner_side', read_only=True)
    startTime = serializers.DateTimeField(source='start_time', read_only=True)
    endTime = serializers.DateTimeField(source='end_time', read_only=True)
    setScores = SetScoreSerializer(source='set_scores', many=True, read_only=True)

    class Meta:
        model = Match
        fields = [
            'id', 'tournamentId', 'round', 'courtNumber', 'scheduledTime', 'refereeId',
            'isDoubles', 'side1', 'side2', 'currentSet', 'sets', 'maxScore', 'isGoldenPoint',
            'status', 'winnerSide', 'startTime', 'endTime', 'setScores',
        ]

    def _side(self, obj, side):
        if obj.is_doubles:
            ref_id = obj.team1_id if side == 1 else obj.team2_id
        else:
            ref_id = obj.player1_id if side == 1 else obj.player2_id
        return {'id': ref_id, 'name': obj.side_name(side), 'score': obj.score_for(side)}

    def get_side1(self, obj):
        return self._side(obj, 1)

    def get_side2(self, obj):
        return self._side(obj, 2)


class CreateMatchSerializer(serializers.Serializer):
    round = serializers.CharField(max_length=50, required=False, default='Round 1')
    courtNumber = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    scheduledTime = serializers.DateTimeField(required=False, allow_null=True)
    isDoubles = serializers.BooleanField(required=False, default=False)
    player1Id = serializers.IntegerField(required=False, allow_null=True)
    player2Id = serializers.IntegerField(required=False, allow_null=True)
    team1Id = serializers.IntegerField(required=False, allow_null=True)
    team2Id = serializers.IntegerField(required=False, allow_null=True)
    sets = serializers.IntegerField(min_value=1, max_value=7, required=False, default=1)
    maxScore = serializers.IntegerField(min_value=1, max_value=50, required=False, default=11)
    isGoldenPoint = serializers.BooleanField(required=False, default=False)
    refereeId = serializers.UUIDField(required=False)

    FIELD_MAP = {
        'round': 'round',
        'courtNumber': 'court_number',
        'scheduledTime': 'scheduled_time',
        'isDoubles': 'is_doubles',
        'player1Id': 'player1_id',
        'player2Id': 'player2_id',
        'team1Id': 'team1_id',
        'team2Id': 'team2_id',
        'sets': 'sets',
        'maxScore': 'max_score',
        'isGoldenPoint': 'is_golden_point',
        'refereeId': 'referee_id',
    }

    def validate_sets(self, value):
        if value % 2 == 0:
            raise serializers.ValidationError('Number of sets must be odd')
        return value

    def to_model_fields(self) -> dict:
        return {self.FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class ScorePointSerializer(serializers.Serializer):
    side = serializers.ChoiceField(choices=[1, 2])


class CompleteSetSerializer(serializers.Serializer):
    force = serializers.BooleanField(required=False, default=False)


class PerformanceInputSerializer(serializers.Serializer):
    playerId = serializers.IntegerField()
    points = serializers.IntegerField(min_value=0, required=False)
    aces = serializers.IntegerField(min_value=0, required=False)
    faults = serializers.IntegerField(min_value=0, required=False)
    winners = serializers.IntegerField(min_value=0, required=False)
    errors = serializers.IntegerField(min_value=0, required=False)
    ralliesWon = serializers.IntegerField(min_value=0, required=False)
    otherStats = serializers.DictField(required=False)

    def stats(self) -> dict:
        data = dict(self.validated_data)
        data.pop('playerId')
        if 'ralliesWon' in data:
            data['rallies_won'] = data.pop('ralliesWon')
        if 'otherStats' in data:
            data['other_stats'] = data.pop('otherStats')
        return data


class MatchPerformanceSerializer(serializers.ModelSerializer):
    playerId = serializers.IntegerField(source='player_id')
    ralliesWon = serializers.IntegerField(source='rallies_won')
    otherStats = serializers.JSONField(source='other_stats')

    class Meta:
        model = MatchPerformance
        fields = ['playerId', 'points', 'aces', 'faults', 'winners', 'errors', 'ralliesWon', 'otherStats']
