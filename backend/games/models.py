# games/models.py
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

User = settings.AUTH_USER_MODEL


class Game(models.Model):
    TYPE_TICTACTOE = "tictactoe"
    TYPE_LOTTERY = "lottery"
    TYPE_POKIE = "pokie"

    TYPE_CHOICES = [
        (TYPE_TICTACTOE, "Tic-Tac-Toe"),
        (TYPE_LOTTERY, "Lottery"),
        (TYPE_POKIE, "Pokie"),
    ]

    STATUS_WAITING = "waiting"
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_WAITING, "Waiting"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    OPEN_STATUSES = (STATUS_WAITING, STATUS_ACTIVE)
    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

    # waiting -> active -> {completed | cancelled}; no way back
    TRANSITIONS = {
        STATUS_WAITING: {STATUS_ACTIVE, STATUS_CANCELLED},
        STATUS_ACTIVE: {STATUS_COMPLETED, STATUS_CANCELLED},
        STATUS_COMPLETED: set(),
        STATUS_CANCELLED: set(),
    }

    MAX_PLAYERS = {
        TYPE_TICTACTOE: 2,
        TYPE_POKIE: 1,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    game_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_TICTACTOE, db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    bet_amount = models.IntegerField(default=100, validators=[MinValueValidator(1)])

    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="created_games")
    winner = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="won_games")

    # board / turn for tictactoe, tickets + expiry for lottery, grid for pokie
    game_data = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "game_type", "created_at"], name="games_game_status_7c1f0e_idx"),
        ]

    def can_transition(self, to_status):
        return to_status in self.TRANSITIONS.get(self.status, set())

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    def __str__(self):
        return f"{self.get_game_type_display()} {self.id} ({self.status})"


class GameParticipant(models.Model):
    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="participants")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="game_entries")
    player_number = models.PositiveIntegerField()
    ticket_numbers = models.JSONField(default=list, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["player_number"]
        constraints = [
            models.UniqueConstraint(fields=["game", "user"], name="unique_participant_per_game"),
            models.UniqueConstraint(fields=["game", "player_number"], name="unique_player_number_per_game"),
        ]

    def __str__(self):
        return f"P{self.player_number} {self.user_id} in {self.game_id}"
