"""
Referee serializers.
"""

from rest_framework import serializers

from .models import JoinRequestStatus, RefereeJoinRequest


class ApplySerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default='')


class JoinRequestSerializer(serializers.ModelSerializer):
    tournamentId = serializers.IntegerField(source='tournament_id')
    tournamentName = serializers.CharField(source='tournament.name')
    refereeUserId = serializers.UUIDField(source='referee.user_id')
    refereeName = serializers.SerializerMethodField()
    certificationLevel = serializers.CharField(source='referee.certification_level')
    reviewedAt = serializers.DateTimeField(source='reviewed_at')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = RefereeJoinRequest
        fields = [
            'id', 'tournamentId', 'tournamentName', 'refereeUserId', 'refereeName',
            'certificationLevel', 'status', 'message', 'reviewedAt', 'createdAt',
        ]

    def get_refereeName(self, obj):
        user = obj.referee.user
        return user.name or user.email


class RequestFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JoinRequestStatus.choices, required=False)
