"""
Game flows: create / join / move / tickets / draw / spin / cancel.

Each flow runs in one database transaction, so a failed step (for example
inserting the participant after the stake was taken) rolls the whole flow
back. Game rows are locked with select_for_update and every write is also
conditional on the version read, so a second writer can never apply a
stale transition (e.g. two concurrent lottery draws).
"""
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from ledger.models import Transaction
from ledger.services import (
    InsufficientBalance,
    LedgerError,
    deduct_game_points,
    handle_game_loss,
    reward_game_points,
)
from .broadcast import publish_game
from .engine import lottery, pokie, tictactoe
from .exceptions import (
    AlreadyJoined,
    GameError,
    GameFull,
    GameNotFound,
    InvalidMove,
    InvalidTransition,
    LotteryExpired,
    LotteryNotReady,
    NotAParticipant,
)
from .models import Game, GameParticipant

logger = logging.getLogger(__name__)

system_rng = secrets.SystemRandom()


# =====================================================
# INTERNAL
# =====================================================

def _get_game_for_update(game_id, game_type=None):
    try:
        game = Game.objects.select_for_update().get(pk=game_id)
    except Game.DoesNotExist:
        raise GameNotFound("Game not found")
    if game_type and game.game_type != game_type:
        raise GameError(f"Not a {game_type} game")
    return game


def _participant(game, user):
    try:
        return game.participants.get(user=user)
    except GameParticipant.DoesNotExist:
        raise NotAParticipant("You are not playing in this game")


def _save(game, *fields):
    """Write fields, bump the version and notify watchers after commit."""
    expected_version = game.version
    game.version = expected_version + 1
    game.updated_at = timezone.now()

    values = {name: getattr(game, name) for name in fields}
    values["version"] = game.version
    values["updated_at"] = game.updated_at

    updated = Game.objects.filter(pk=game.pk, version=expected_version).update(**values)
    if updated == 0:
        raise GameError("Game state changed, please retry")

    publish_game(game.pk)
    return game


def transition(game, to_status, **changes):
    """
    Move a game along waiting -> active -> completed/cancelled.
    Terminal states never change again.
    """
    if not game.can_transition(to_status):
        raise InvalidTransition(f"Cannot move game from {game.status} to {to_status}")

    game.status = to_status
    if to_status in Game.TERMINAL_STATUSES:
        changes.setdefault("completed_at", timezone.now())
    for name, value in changes.items():
        setattr(game, name, value)

    logger.info("Game %s -> %s", game.pk, to_status)
    return _save(game, "status", *changes.keys())


def _precheck_balance(session, amount):
    session.refresh()
    if not session.can_afford(amount):
        raise InsufficientBalance("Insufficient points!")


# =====================================================
# CREATE
# =====================================================

def create_game(session, game_type, bet_amount, min_players=None, duration_minutes=None, now=None):
    if game_type not in dict(Game.TYPE_CHOICES):
        raise GameError("Invalid game type")
    if bet_amount <= 0:
        raise GameError("Bet amount must be positive")

    _precheck_balance(session, bet_amount)
    now = now or timezone.now()

    if game_type == Game.TYPE_TICTACTOE:
        game_data = {
            "board": tictactoe.new_board(),
            "current_player": tictactoe.X,
            "moves": 0,
        }
    elif game_type == Game.TYPE_LOTTERY:
        min_players = min_players or settings.LOTTERY_DEFAULT_MIN_PLAYERS
        if min_players < 2:
            raise GameError("A lottery needs at least 2 players")
        duration = duration_minutes or settings.LOTTERY_DURATION_MINUTES
        game_data = {
            "min_players": min_players,
            "ticket_price": bet_amount,
            "total_tickets": 1,
            "expires_at": (now + timedelta(minutes=duration)).isoformat(),
        }
    else:
        game_data = {}

    with transaction.atomic():
        game = Game.objects.create(
            game_type=game_type,
            bet_amount=bet_amount,
            created_by=session.user,
            game_data=game_data,
        )
        deduct_game_points(session.user, game, bet_amount, Transaction.GAME_BET)
        GameParticipant.objects.create(
            game=game,
            user=session.user,
            player_number=1,
            ticket_numbers=[1] if game_type == Game.TYPE_LOTTERY else [],
        )
        publish_game(game.pk)

    session.refresh()
    logger.info("User %s created %s game %s (bet %s)", session.user_id, game_type, game.pk, bet_amount)
    return game


# =====================================================
# TIC-TAC-TOE
# =====================================================

def join_game(session, game_id):
    game = Game.objects.filter(pk=game_id).first()
    if game is None:
        raise GameNotFound("Game not found")
    _precheck_balance(session, game.bet_amount)

    with transaction.atomic():
        game = _get_game_for_update(game_id, Game.TYPE_TICTACTOE)

        if game.status != Game.STATUS_WAITING:
            raise GameFull("Game is no longer waiting for players")
        if game.participants.filter(user=session.user).exists():
            raise AlreadyJoined("You are already in this game")
        if game.participants.count() >= Game.MAX_PLAYERS[Game.TYPE_TICTACTOE]:
            raise GameFull("Game is full")

        deduct_game_points(session.user, game, game.bet_amount, Transaction.GAME_JOIN)
        GameParticipant.objects.create(game=game, user=session.user, player_number=2)

        transition(
            game,
            Game.STATUS_ACTIVE,
            game_data={
                "board": tictactoe.new_board(),
                "current_player": tictactoe.X,
                "moves": 0,
                "started_at": timezone.now().isoformat(),
            },
        )

    session.refresh()
    return game


def make_move(session, game_id, index):
    with transaction.atomic():
        game = _get_game_for_update(game_id, Game.TYPE_TICTACTOE)
        if game.status != Game.STATUS_ACTIVE:
            raise InvalidMove("Game is not active")

        me = _participant(game, session.user)
        symbol = tictactoe.symbol_for(me.player_number)
        data = dict(game.game_data)

        board = tictactoe.apply_move(data["board"], index, symbol, data["current_player"])
        result = tictactoe.check_winner(board)

        data.update(
            board=board,
            current_player=tictactoe.next_player(symbol),
            moves=data.get("moves", 0) + 1,
            last_move={"index": index, "symbol": symbol},
        )

        if result is None:
            game.game_data = data
            return _save(game, "game_data")

        # terminal board: settle exactly once, inside the same transaction
        data["result"] = result
        data["current_player"] = None
        players = list(game.participants.select_related("user"))

        if result == tictactoe.DRAW:
            transition(game, Game.STATUS_COMPLETED, game_data=data, winner=None)
            for p in players:
                reward_game_points(p.user, game, game.bet_amount, Transaction.GAME_DRAW)
        else:
            winner = next(p for p in players if tictactoe.symbol_for(p.player_number) == result)
            transition(game, Game.STATUS_COMPLETED, game_data=data, winner=winner.user)
            reward_game_points(winner.user, game, game.bet_amount * 2, Transaction.GAME_WIN)
            for p in players:
                if p.pk != winner.pk:
                    handle_game_loss(p.user, game)

        logger.info("Tic-tac-toe %s finished: %s", game.pk, result)

    session.refresh()
    return game


# =====================================================
# LOTTERY
# =====================================================

def _lottery_entries(game):
    return [(p.user_id, p.ticket_numbers) for p in game.participants.all()]


def buy_ticket(session, game_id, now=None):
    now = now or timezone.now()
    game = Game.objects.filter(pk=game_id).first()
    if game is None:
        raise GameNotFound("Game not found")
    _precheck_balance(session, game.bet_amount)

    with transaction.atomic():
        game = _get_game_for_update(game_id, Game.TYPE_LOTTERY)

        if not game.is_open:
            raise LotteryExpired("This lottery is closed")
        if lottery.is_expired(game.game_data.get("expires_at"), now):
            raise LotteryExpired("This lottery has expired")

        deduct_game_points(session.user, game, game.bet_amount, Transaction.GAME_JOIN)

        data = dict(game.game_data)
        ticket_number = data.get("total_tickets", 0) + 1

        entry = game.participants.filter(user=session.user).first()
        if entry is None:
            next_number = (game.participants.aggregate(n=Max("player_number"))["n"] or 0) + 1
            entry = GameParticipant.objects.create(
                game=game,
                user=session.user,
                player_number=next_number,
                ticket_numbers=[ticket_number],
            )
        else:
            entry.ticket_numbers = list(entry.ticket_numbers) + [ticket_number]
            entry.save(update_fields=["ticket_numbers"])

        data["total_tickets"] = ticket_number
        game.game_data = data

        players = game.participants.count()
        if game.status == Game.STATUS_WAITING and lottery.can_draw(players, data["min_players"]):
            transition(game, Game.STATUS_ACTIVE, game_data=data)
        else:
            _save(game, "game_data")

    session.refresh()
    logger.info("User %s bought ticket #%s in lottery %s", session.user_id, ticket_number, game.pk)
    return game


def settle_lottery(game, rng=None):
    """Pay the whole pot to the owner of one uniformly drawn ticket."""
    rng = rng or system_rng
    participants = list(game.participants.select_related("user__profile"))
    entries = [(p.user_id, p.ticket_numbers) for p in participants]

    if not lottery.can_draw(len(participants), game.game_data.get("min_players", 2)):
        raise LotteryNotReady(
            f"Need at least {game.game_data.get('min_players', 2)} players to draw"
        )

    tickets = lottery.flatten_tickets(entries)
    ticket_number, winner_id = lottery.draw_ticket(tickets, rng)
    pot = lottery.total_pot(game.bet_amount, len(tickets))
    winner = next(p for p in participants if p.user_id == winner_id)

    data = dict(game.game_data)
    data.update(
        winner=winner_id,
        winner_username=winner.user.profile.username,
        winning_ticket=ticket_number,
        total_players=len(participants),
        total_tickets=len(tickets),
        prize_amount=pot,
    )

    # status first: a concurrent draw fails here before anything is paid
    transition(game, Game.STATUS_COMPLETED, winner=winner.user, game_data=data)

    reward_game_points(winner.user, game, pot, Transaction.GAME_WIN, description="Lottery prize")
    for p in participants:
        if p.user_id != winner_id:
            handle_game_loss(p.user, game)

    logger.info("Lottery %s drawn: ticket #%s, user %s wins %s", game.pk, ticket_number, winner_id, pot)
    return game


def cancel_lottery(game):
    """Refund every ticket and close the lottery."""
    refunds = lottery.refund_amounts(_lottery_entries(game), game.bet_amount)
    participants = {p.user_id: p.user for p in game.participants.select_related("user")}

    data = dict(game.game_data)
    data["cancel_reason"] = "not_enough_players"
    transition(game, Game.STATUS_CANCELLED, game_data=data)

    for user_id, amount in refunds.items():
        reward_game_points(
            participants[user_id], game, amount, Transaction.GAME_REWARD,
            description="Lottery cancelled refund", count_game=False,
        )

    logger.info("Lottery %s cancelled, refunded %s players", game.pk, len(refunds))
    return game


def _settle_after_deadline(game, rng=None):
    """Expired lottery: draw if it reached its minimum, otherwise refund everyone."""
    players = game.participants.count()
    if lottery.can_draw(players, game.game_data.get("min_players", 2)):
        settle_lottery(game, rng)
        return "drawn"
    cancel_lottery(game)
    return "cancelled"


def draw_lottery(session, game_id, rng=None, now=None):
    now = now or timezone.now()

    with transaction.atomic():
        game = _get_game_for_update(game_id, Game.TYPE_LOTTERY)
        _participant(game, session.user)

        if not game.is_open:
            raise InvalidTransition("This lottery has already been settled")

        if lottery.is_expired(game.game_data.get("expires_at"), now):
            _settle_after_deadline(game, rng)
        else:
            settle_lottery(game, rng)

    session.refresh()
    return game


def settle_expired_lotteries(now=None, rng=None):
    """
    Draw or cancel every open lottery whose deadline has passed.
    Returns {"drawn": [...ids], "cancelled": [...ids]}.
    """
    now = now or timezone.now()
    summary = {"drawn": [], "cancelled": []}

    candidates = Game.objects.filter(
        game_type=Game.TYPE_LOTTERY, status__in=Game.OPEN_STATUSES
    ).values_list("pk", "game_data")

    for game_id, data in candidates:
        try:
            if not lottery.is_expired((data or {}).get("expires_at"), now):
                continue
            with transaction.atomic():
                game = _get_game_for_update(game_id)
                if not game.is_open:
                    continue
                outcome = _settle_after_deadline(game, rng)
                summary[outcome].append(game_id)
        except (GameError, LedgerError, ValueError):
            # one broken lottery must not stop the rest of the pass
            logger.exception("Could not settle expired lottery %s", game_id)

    return summary


# =====================================================
# POKIE
# =====================================================

def spin_pokie(session, game_id, rng=None):
    rng = rng or system_rng

    with transaction.atomic():
        game = _get_game_for_update(game_id, Game.TYPE_POKIE)
        if game.created_by_id != session.user_id:
            raise NotAParticipant("This machine belongs to another player")
        if game.status != Game.STATUS_WAITING:
            raise InvalidTransition("This machine has already been played")

        transition(game, Game.STATUS_ACTIVE)

        grid = pokie.spin_grid(rng)
        result = pokie.evaluate(grid, game.bet_amount, mode=settings.POKIE_PAYOUT_MODE)

        data = {
            "grid": grid,
            "wins": [line["label"] for line in result.lines],
            "lines": result.lines,
            "symbol": result.symbol,
            "multiplier": result.multiplier,
            "win_amount": result.payout,
        }
        transition(
            game,
            Game.STATUS_COMPLETED,
            game_data=data,
            winner=session.user if result.won else None,
        )

        if result.won:
            reward_game_points(session.user, game, result.payout, Transaction.GAME_WIN)
        else:
            handle_game_loss(session.user, game)

    session.refresh()
    logger.info("Pokie %s: %s lines, payout %s", game.pk, len(result.lines), result.payout)
    return game, result


# =====================================================
# CANCEL (creator, before anyone joins)
# =====================================================

def cancel_game(session, game_id):
    with transaction.atomic():
        game = _get_game_for_update(game_id)
        if game.game_type == Game.TYPE_LOTTERY:
            raise GameError("Lotteries close automatically when they expire")
        if game.created_by_id != session.user_id:
            raise NotAParticipant("Only the creator can cancel this game")
        if game.status != Game.STATUS_WAITING or game.participants.count() > 1:
            raise InvalidTransition("Only a game nobody has joined can be cancelled")

        transition(game, Game.STATUS_CANCELLED)
        reward_game_points(
            session.user, game, game.bet_amount, Transaction.GAME_REWARD,
            description="Game cancelled refund", count_game=False,
        )

    session.refresh()
    return game


# =====================================================
# LOBBY
# =====================================================

def list_open_games(game_type=None, statuses=Game.OPEN_STATUSES):
    qs = (
        Game.objects.filter(status__in=statuses)
        .select_related("created_by")
        .prefetch_related("participants__user__profile")
        .order_by("-created_at")
    )
    if game_type:
        qs = qs.filter(game_type=game_type)
    return qs
