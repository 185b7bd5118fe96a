import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from games.models import Game
from ledger.models import Transaction
from ledger.services import (
    InsufficientBalance,
    LedgerError,
    deduct_game_points,
    handle_game_loss,
    ledger_balance,
    reward_game_points,
)


pytestmark = pytest.mark.django_db


@pytest.fixture
def game(alice):
    return Game.objects.create(game_type=Game.TYPE_TICTACTOE, bet_amount=100, created_by=alice)


def test_signup_creates_profile_and_bonus_row(alice, settings):
    profile = alice.profile
    assert profile.points_balance == settings.SIGNUP_BONUS_POINTS
    row = Transaction.objects.get(user=alice)
    assert row.transaction_type == Transaction.SIGNUP_BONUS
    assert row.amount == settings.SIGNUP_BONUS_POINTS


def test_deduct_writes_negative_row(alice, game):
    balance = deduct_game_points(alice, game, 100, Transaction.GAME_BET)

    alice.profile.refresh_from_db()
    assert balance == alice.profile.points_balance == 900
    row = Transaction.objects.filter(user=alice, game=game).get()
    assert row.amount == -100
    assert row.transaction_type == Transaction.GAME_BET


def test_deduct_more_than_balance_changes_nothing(alice, game):
    with pytest.raises(InsufficientBalance):
        deduct_game_points(alice, game, 5000, Transaction.GAME_BET)

    alice.profile.refresh_from_db()
    assert alice.profile.points_balance == 1000
    assert not Transaction.objects.filter(game=game).exists()


def test_deduct_rejects_bad_input(alice, game):
    with pytest.raises(LedgerError):
        deduct_game_points(alice, game, 0, Transaction.GAME_BET)
    with pytest.raises(LedgerError):
        deduct_game_points(alice, game, 10, Transaction.GAME_WIN)


def test_reward_type_decides_win_counter(alice, game):
    reward_game_points(alice, game, 100, Transaction.GAME_DRAW)
    alice.profile.refresh_from_db()
    assert alice.profile.total_games_played == 1
    assert alice.profile.total_games_won == 0

    reward_game_points(alice, game, 200, Transaction.GAME_WIN)
    alice.profile.refresh_from_db()
    assert alice.profile.total_games_played == 2
    assert alice.profile.total_games_won == 1
    assert alice.profile.points_balance == 1300


def test_loss_only_counts_the_game(alice, game):
    handle_game_loss(alice, game)
    alice.profile.refresh_from_db()
    assert alice.profile.total_games_played == 1
    assert alice.profile.total_games_won == 0
    assert alice.profile.points_balance == 1000


def test_balance_matches_signed_sum_after_mixed_calls(alice, game):
    deduct_game_points(alice, game, 250, Transaction.GAME_BET)
    reward_game_points(alice, game, 500, Transaction.GAME_WIN)
    deduct_game_points(alice, game, 75, Transaction.GAME_JOIN)
    handle_game_loss(alice, game)
    with pytest.raises(InsufficientBalance):
        deduct_game_points(alice, game, 10_000, Transaction.GAME_BET)
    reward_game_points(alice, game, 30, Transaction.GAME_REWARD)

    alice.profile.refresh_from_db()
    assert alice.profile.points_balance == 1000 - 250 + 500 - 75 + 30
    assert ledger_balance(alice) == alice.profile.points_balance


def test_audit_ledger_reports_mismatch(alice, bob, capsys):
    call_command("audit_ledger", "--strict")

    type(alice.profile).objects.filter(pk=alice.profile.pk).update(points_balance=5)
    with pytest.raises(CommandError):
        call_command("audit_ledger", "--strict")
