# accounts/models.py
import string
import random
from django.contrib.auth.models import AbstractUser
from django.db import models


VIP_LABELS = ["Free Player", "VIP Bronze", "VIP Silver", "VIP Gold"]


def generate_uid(length=8):
    chars = string.ascii_uppercase + string.digits
    return ''.join(random.choices(chars, k=length))


class User(AbstractUser):
    email = models.EmailField(unique=True, db_index=True)

    user_uid = models.CharField(
        max_length=8,
        unique=True,
        editable=False,
        db_index=True
    )

    def save(self, *args, **kwargs):
        if not self.user_uid:
            while True:
                uid = generate_uid()
                if not User.objects.filter(user_uid=uid).exists():
                    self.user_uid = uid
                    break

        super().save(*args, **kwargs)

    def __str__(self):
        return self.email or self.username


class Profile(models.Model):
    """
    Public player profile.

    points_balance is owned by the ledger (ledger.services); the edit form
    only touches username / display_name / avatar_url.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="profile"
    )
    username = models.CharField(max_length=50, unique=True, db_index=True)
    display_name = models.CharField(max_length=120, blank=True, default="Player")
    avatar_url = models.URLField(blank=True, default="")

    points_balance = models.IntegerField(default=0)
    total_games_played = models.IntegerField(default=0)
    total_games_won = models.IntegerField(default=0)
    vip_level = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_balance__gte=0),
                name="profile_points_balance_non_negative",
            ),
        ]

    @property
    def win_rate(self):
        if not self.total_games_played:
            return 0
        return round(self.total_games_won / self.total_games_played * 100)

    @property
    def vip_label(self):
        if 0 <= self.vip_level < len(VIP_LABELS):
            return VIP_LABELS[self.vip_level]
        return "VIP Elite"

    def __str__(self):
        return f"{self.username} ({self.points_balance} pts)"
