import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

LOBBY_GROUP = "lobby"


def game_group(game_id):
    return f"game_{game_id}"


def _send_snapshot(game_id):
    from .models import Game
    from .serializers import serialize_game

    game = (
        Game.objects.select_related("created_by")
        .prefetch_related("participants__user__profile")
        .filter(pk=game_id)
        .first()
    )
    if game is None:
        return

    payload = serialize_game(game)
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            game_group(game_id),
            {"type": "game.update", "game": payload},
        )
        async_to_sync(channel_layer.group_send)(
            LOBBY_GROUP,
            {"type": "lobby.update", "game": payload},
        )
    except Exception:
        # The write is already committed; clients catch up through polling.
        logger.exception("Failed to push update for game %s", game_id)


def publish_game(game_id):
    """Push the game's committed state to its watchers and the lobby."""
    transaction.on_commit(lambda: _send_snapshot(game_id))
