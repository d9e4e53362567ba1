"""
Tournament serializers for request/response validation.
"""

from rest_framework import serializers

from .models import Player, PlayerStats, SkillLevel, Team, Tournament, TournamentStatus, TournamentType


# Maps request keys onto model field names
TOURNAMENT_FIELD_MAP = {
    'startDate': 'start_date',
    'endDate': 'end_date',
    'registrationOpenDate': 'registration_open_date',
    'registrationCloseDate': 'registration_close_date',
    'maxParticipants': 'max_participants',
    'entryFee': 'entry_fee',
    'prizeMoney': 'prize_money',
}


class TournamentInputSerializer(serializers.Serializer):
    """
    Serializer for creating/updating tournaments
    """
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=TournamentType.choices, required=False)
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    registrationOpenDate = serializers.DateTimeField(required=False, allow_null=True)
    registrationCloseDate = serializers.DateTimeField()
    maxParticipants = serializers.IntegerField(min_value=2)
    entryFee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    prizeMoney = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        close = attrs.get('registrationCloseDate')
        if start and end and end < start:
            raise serializers.ValidationError({'endDate': 'End date must be on or after the start date'})
        if start and close and close > start:
            raise serializers.ValidationError(
                {'registrationCloseDate': 'Registration must close before the tournament starts'}
            )
        return attrs

    def to_model_fields(self) -> dict:
        return {TOURNAMENT_FIELD_MAP.get(k, k): v for k, v in self.validated_data.items()}


class TournamentSerializer(serializers.ModelSerializer):
    startDate = serializers.DateTimeField(source='start_date')
    endDate = serializers.DateTimeField(source='end_date')
    registrationOpenDate = serializers.DateTimeField(source='registration_open_date')
    registrationCloseDate = serializers.DateTimeField(source='registration_close_date')
    maxParticipants = serializers.IntegerField(source='max_participants')
    entryFee = serializers.DecimalField(source='entry_fee', max_digits=10, decimal_places=2)
    prizeMoney = serializers.DecimalField(source='prize_money', max_digits=12, decimal_places=2)
    organizerId = serializers.UUIDField(source='organizer_id')
    fantasySettings = serializers.JSONField(source='fantasy_settings')
    participantCount = serializers.SerializerMethodField()

    class Meta:
        model = Tournament
        fields = [
            'id', 'name', 'description', 'location', 'type', 'status',
            'startDate', 'endDate', 'registrationOpenDate', 'registrationCloseDate',
            'maxParticipants', 'entryFee', 'prizeMoney', 'organizerId',
            'fantasySettings', 'participantCount',
        ]

    def get_participantCount(self, obj):
        return obj.entries.count()


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TournamentStatus.choices)


class PlayerSerializer(serializers.ModelSerializer):
    skillLevel = serializers.ChoiceField(source='skill_level', choices=SkillLevel.choices, required=False)
    imageUrl = serializers.URLField(source='image_url', required=False, allow_blank=True)
    totalPoints = serializers.DecimalField(source='total_points', max_digits=10, decimal_places=2, read_only=True)
    userId = serializers.UUIDField(source='user_id', required=False, allow_null=True)

    class Meta:
        model = Player
        fields = [
            'id', 'name', 'userId', 'country', 'age', 'gender', 'imageUrl',
            'skillLevel', 'ranking', 'totalPoints',
        ]


class RegisterPlayerSerializer(serializers.Serializer):
    playerId = serializers.IntegerField()
    seed = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class TeamSerializer(serializers.ModelSerializer):
    players = PlayerSerializer(many=True, read_only=True)
    tournamentId = serializers.IntegerField(source='tournament_id', read_only=True)

    class Meta:
        model = Team
        fields = ['id', 'name', 'tournamentId', 'players']


class CreateTeamSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    playerIds = serializers.ListField(child=serializers.IntegerField(), min_length=2, max_length=2)


class PlayerStatsSerializer(serializers.ModelSerializer):
    player = PlayerSerializer(read_only=True)
    matchesPlayed = serializers.IntegerField(source='matches_played')
    pointsScored = serializers.IntegerField(source='points_scored')
    pointsConceded = serializers.IntegerField(source='points_conceded')
    pointDifference = serializers.IntegerField(source='point_difference')
    fantasyPoints = serializers.DecimalField(source='fantasy_points', max_digits=10, decimal_places=2)

    class Meta:
        model = PlayerStats
        fields = [
            'player', 'matchesPlayed', 'wins', 'losses',
            'pointsScored', 'pointsConceded', 'pointDifference', 'fantasyPoints',
        ]


class FantasySetupSerializer(serializers.Serializer):
    enableFantasy = serializers.BooleanField(default=False)
    fantasyPoints = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    autoPublish = serializers.BooleanField(default=False)
    customPoints = serializers.DictField(required=False, default=dict)
    contests = serializers.ListField(child=serializers.DictField(), required=False, default=list)
