import logging
from functools import wraps

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.session import NoProfile, PlayerSession
from ledger.services import LedgerError
from . import services
from .exceptions import GameError, GameNotFound
from .models import Game
from .serializers import CreateGameIn, MoveIn, serialize_game

logger = logging.getLogger(__name__)


def game_errors(view):
    """Turn rule violations into {"error": ...} responses."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except GameNotFound as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (GameError, LedgerError, NoProfile) as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return wrapper


def _game_or_404(game_id):
    game = (
        Game.objects.select_related("created_by")
        .prefetch_related("participants__user__profile")
        .filter(pk=game_id)
        .first()
    )
    if game is None:
        raise GameNotFound("Game not found")
    return game


def _player_response(game, session, **extra):
    body = {
        "game": serialize_game(_game_or_404(game.pk)),
        "balance": session.profile.points_balance,
    }
    body.update(extra)
    return Response(body)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@game_errors
def games(request):
    if request.method == "GET":
        game_type = request.query_params.get("game_type")
        statuses = Game.OPEN_STATUSES
        if request.query_params.get("status"):
            statuses = request.query_params.get("status").split(",")

        qs = services.list_open_games(game_type=game_type, statuses=statuses)
        return Response({
            "games": [serialize_game(g) for g in qs[:100]],
            "poll_interval": settings.LOBBY_POLL_SECONDS,
        })

    serializer = CreateGameIn(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    session = PlayerSession.from_request(request)
    game = services.create_game(session, **serializer.validated_data)
    resp = _player_response(game, session)
    resp.status_code = status.HTTP_201_CREATED
    return resp


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@game_errors
def game_detail(request, game_id):
    game = _game_or_404(game_id)

    since = request.query_params.get("since_version")
    if since is not None:
        try:
            since = int(since)
        except ValueError:
            return Response({"error": "Invalid since_version"}, status=status.HTTP_400_BAD_REQUEST)
        if game.version <= since:
            return Response({"changed": False, "version": game.version})

    return Response(serialize_game(game))


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def join(request, game_id):
    session = PlayerSession.from_request(request)
    game = services.join_game(session, game_id)
    return _player_response(game, session)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def move(request, game_id):
    serializer = MoveIn(data=request.data)
    if not serializer.is_valid():
        return Response({"error": "Cell index must be between 0 and 8"}, status=status.HTTP_400_BAD_REQUEST)

    session = PlayerSession.from_request(request)
    game = services.make_move(session, game_id, serializer.validated_data["index"])
    return _player_response(game, session)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def tickets(request, game_id):
    session = PlayerSession.from_request(request)
    game = services.buy_ticket(session, game_id)
    mine = game.participants.get(user=request.user).ticket_numbers
    return _player_response(game, session, tickets=mine)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def draw(request, game_id):
    session = PlayerSession.from_request(request)
    game = services.draw_lottery(session, game_id)
    return _player_response(game, session)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def spin(request, game_id):
    session = PlayerSession.from_request(request)
    game, result = services.spin_pokie(session, game_id)
    return _player_response(
        game,
        session,
        result={
            "grid": result.grid,
            "wins": [line["label"] for line in result.lines],
            "multiplier": result.multiplier,
            "win_amount": result.payout,
        },
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@game_errors
def cancel(request, game_id):
    session = PlayerSession.from_request(request)
    game = services.cancel_game(session, game_id)
    return _player_response(game, session)
