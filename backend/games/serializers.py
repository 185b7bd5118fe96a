# games/serializers.py
from rest_framework import serializers

from .models import Game, GameParticipant


class ParticipantOut(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    username = serializers.CharField(source="user.profile.username", read_only=True, default="Unknown")
    vip_level = serializers.IntegerField(source="user.profile.vip_level", read_only=True, default=0)

    class Meta:
        model = GameParticipant
        fields = ["user_id", "username", "vip_level", "player_number", "ticket_numbers", "joined_at"]


class GameOut(serializers.ModelSerializer):
    created_by = serializers.IntegerField(source="created_by_id", read_only=True)
    winner_id = serializers.IntegerField(read_only=True, allow_null=True)
    participants = ParticipantOut(many=True, read_only=True)

    class Meta:
        model = Game
        fields = [
            "id",
            "game_type",
            "status",
            "bet_amount",
            "created_by",
            "winner_id",
            "game_data",
            "version",
            "participants",
            "created_at",
            "updated_at",
            "completed_at",
        ]


class CreateGameIn(serializers.Serializer):
    game_type = serializers.ChoiceField(choices=[c[0] for c in Game.TYPE_CHOICES])
    bet_amount = serializers.IntegerField(min_value=1)
    min_players = serializers.IntegerField(min_value=2, max_value=100, required=False)
    duration_minutes = serializers.IntegerField(min_value=1, max_value=1440, required=False)


class MoveIn(serializers.Serializer):
    index = serializers.IntegerField(min_value=0, max_value=8)


def serialize_game(game):
    return GameOut(game).data
