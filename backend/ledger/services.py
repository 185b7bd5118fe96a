import logging

from django.db import transaction
from django.db.models import Sum

from accounts.models import Profile
from .models import Transaction

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    pass


class InsufficientBalance(LedgerError):
    pass


class ProfileMissing(LedgerError):
    pass


DEBIT_TYPES = (Transaction.GAME_BET, Transaction.GAME_JOIN)
CREDIT_TYPES = (Transaction.GAME_WIN, Transaction.GAME_DRAW, Transaction.GAME_REWARD)

DEBIT_DESCRIPTIONS = {
    Transaction.GAME_BET: "Bet placed for game",
    Transaction.GAME_JOIN: "Joined game",
}

CREDIT_DESCRIPTIONS = {
    Transaction.GAME_WIN: "Game win reward",
    Transaction.GAME_DRAW: "Game draw refund",
    Transaction.GAME_REWARD: "Game reward",
}


# ======================================================
# INTERNAL
# ======================================================
def _get_profile_for_update(user):
    try:
        return Profile.objects.select_for_update().get(user=user)
    except Profile.DoesNotExist:
        raise ProfileMissing(f"No profile for user {getattr(user, 'pk', user)}")


# ======================================================
# DEDUCT (bet / join)
# ======================================================
@transaction.atomic
def deduct_game_points(user, game, amount: int, transaction_type: str) -> int:
    """
    Take a stake from the player's balance.

    The profile row stays locked until the surrounding transaction commits,
    so concurrent deductions for the same user are serialised.
    Returns the new balance.
    """
    if amount <= 0:
        raise LedgerError("Invalid bet amount")
    if transaction_type not in DEBIT_TYPES:
        raise LedgerError(f"Invalid debit type: {transaction_type}")

    profile = _get_profile_for_update(user)

    if profile.points_balance < amount:
        raise InsufficientBalance("Insufficient points balance")

    profile.points_balance -= amount
    profile.save(update_fields=["points_balance", "updated_at"])

    Transaction.objects.create(
        user=profile.user,
        game=game,
        amount=-amount,
        transaction_type=transaction_type,
        description=DEBIT_DESCRIPTIONS.get(transaction_type, "Game transaction"),
    )

    logger.info(
        "Deducted %s pts from user %s (%s, game %s)",
        amount, profile.user_id, transaction_type, getattr(game, "pk", None),
    )
    return profile.points_balance


# ======================================================
# REWARD (win / draw refund / other credit)
# ======================================================
@transaction.atomic
def reward_game_points(user, game, amount: int, transaction_type: str = Transaction.GAME_WIN,
                       description: str = None, count_game: bool = True) -> int:
    """
    Credit a payout and count the game as played.

    The outcome is explicit: only GAME_WIN bumps total_games_won.
    Refunds for games that never started pass count_game=False.
    """
    if amount < 0:
        raise LedgerError("Invalid payout amount")
    if transaction_type not in CREDIT_TYPES:
        raise LedgerError(f"Invalid credit type: {transaction_type}")

    profile = _get_profile_for_update(user)

    profile.points_balance += amount
    if count_game:
        profile.total_games_played += 1
    if transaction_type == Transaction.GAME_WIN:
        profile.total_games_won += 1
    profile.save(update_fields=[
        "points_balance", "total_games_played", "total_games_won", "updated_at",
    ])

    Transaction.objects.create(
        user=profile.user,
        game=game,
        amount=amount,
        transaction_type=transaction_type,
        description=description or CREDIT_DESCRIPTIONS[transaction_type],
    )

    logger.info(
        "Credited %s pts to user %s (%s, game %s)",
        amount, profile.user_id, transaction_type, getattr(game, "pk", None),
    )
    return profile.points_balance


# ======================================================
# LOSS (stats only)
# ======================================================
@transaction.atomic
def handle_game_loss(user, game):
    profile = _get_profile_for_update(user)
    profile.total_games_played += 1
    profile.save(update_fields=["total_games_played", "updated_at"])
    logger.info("Recorded loss for user %s (game %s)", profile.user_id, getattr(game, "pk", None))


# ======================================================
# SIGNUP
# ======================================================
@transaction.atomic
def grant_signup_bonus(profile, amount: int):
    locked = Profile.objects.select_for_update().get(pk=profile.pk)
    locked.points_balance += amount
    locked.save(update_fields=["points_balance", "updated_at"])

    Transaction.objects.create(
        user=locked.user,
        amount=amount,
        transaction_type=Transaction.SIGNUP_BONUS,
        description="Welcome bonus points",
    )

    # callers (and user.profile) keep holding the instance they passed in
    profile.points_balance = locked.points_balance
    profile.updated_at = locked.updated_at
    return locked.points_balance


def ledger_balance(user) -> int:
    """Signed sum of every ledger row for the user."""
    total = Transaction.objects.filter(user=user).aggregate(total=Sum("amount"))["total"]
    return total or 0
