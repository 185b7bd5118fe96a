from django.conf import settings
from django.db import models


class Transaction(models.Model):
    """Append-only points ledger row. Debits are stored negative."""

    GAME_BET = "game_bet"
    GAME_JOIN = "game_join"
    GAME_WIN = "game_win"
    GAME_DRAW = "game_draw"
    GAME_LOSS = "game_loss"
    GAME_REWARD = "game_reward"
    SIGNUP_BONUS = "signup_bonus"
    ADMIN_ADJUSTMENT = "admin_adjustment"

    TYPE_CHOICES = [
        (GAME_BET, "Game bet"),
        (GAME_JOIN, "Game join"),
        (GAME_WIN, "Game win"),
        (GAME_DRAW, "Game draw"),
        (GAME_LOSS, "Game loss"),
        (GAME_REWARD, "Game reward"),
        (SIGNUP_BONUS, "Signup bonus"),
        (ADMIN_ADJUSTMENT, "Admin adjustment"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="point_transactions"
    )
    game = models.ForeignKey(
        "games.Game",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="transactions",
    )
    amount = models.IntegerField()
    transaction_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="ledger_tran_user_id_5b2e4a_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount:+d} for {self.user_id}"
