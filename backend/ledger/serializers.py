from rest_framework import serializers

from accounts.models import Profile
from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    game_id = serializers.PrimaryKeyRelatedField(source="game", read_only=True)

    class Meta:
        model = Transaction
        fields = ['id', 'game_id', 'amount', 'transaction_type', 'description', 'created_at']


class BalanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ['points_balance', 'total_games_played', 'total_games_won', 'updated_at']
