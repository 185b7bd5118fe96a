import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Game",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("game_type", models.CharField(choices=[("tictactoe", "Tic-Tac-Toe"), ("lottery", "Lottery"), ("pokie", "Pokie")], db_index=True, default="tictactoe", max_length=16)),
                ("status", models.CharField(choices=[("waiting", "Waiting"), ("active", "Active"), ("completed", "Completed"), ("cancelled", "Cancelled")], db_index=True, default="waiting", max_length=16)),
                ("bet_amount", models.IntegerField(default=100, validators=[django.core.validators.MinValueValidator(1)])),
                ("game_data", models.JSONField(blank=True, default=dict)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="created_games", to=settings.AUTH_USER_MODEL)),
                ("winner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="won_games", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "game_type", "created_at"], name="games_game_status_7c1f0e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="GameParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("player_number", models.PositiveIntegerField()),
                ("ticket_numbers", models.JSONField(blank=True, default=list)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("game", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="games.game")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="game_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["player_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("game", "user"), name="unique_participant_per_game"),
                    models.UniqueConstraint(fields=("game", "player_number"), name="unique_player_number_per_game"),
                ],
            },
        ),
    ]
