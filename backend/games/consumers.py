import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from .broadcast import LOBBY_GROUP, game_group
from .models import Game
from .serializers import serialize_game
from .sync import VersionTracker

logger = logging.getLogger(__name__)


class GameConsumer(AsyncJsonWebsocketConsumer):
    """Pushes snapshots of one game to everyone watching it."""

    async def connect(self):
        if self.scope["user"].is_anonymous:
            await self.close()
            return

        self.user = self.scope["user"]
        self.game_id = str(self.scope["url_route"]["kwargs"]["game_id"])
        self.group_name = game_group(self.game_id)
        self.versions = VersionTracker()

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send_json({"type": "connected", "game_id": self.game_id})

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive_json(self, content, **kwargs):
        kind = content.get("type")

        if kind == "ping":
            await self.send_json({"type": "pong"})
        elif kind == "sync":
            await self.handle_sync(content.get("version", 0))
        else:
            await self.send_json({"type": "error", "message": "Unknown message type"})

    async def handle_sync(self, version):
        try:
            version = int(version)
        except (TypeError, ValueError):
            await self.send_json({"type": "error", "message": "Invalid version"})
            return

        snapshot = await self._snapshot()
        if snapshot is None:
            await self.send_json({"type": "error", "message": "Game not found"})
            return

        if snapshot["version"] <= version:
            await self.send_json({"type": "sync", "changed": False, "version": snapshot["version"]})
            return

        self.versions.accept(self.game_id, snapshot["version"])
        await self.send_json({"type": "game_update", "game": snapshot})

    async def game_update(self, event):
        game = event["game"]
        if not self.versions.accept(game["id"], game["version"]):
            return
        await self.send_json({"type": "game_update", "game": game})

    @database_sync_to_async
    def _snapshot(self):
        game = (
            Game.objects.select_related("created_by")
            .prefetch_related("participants__user__profile")
            .filter(pk=self.game_id)
            .first()
        )
        return serialize_game(game) if game else None


class LobbyConsumer(AsyncJsonWebsocketConsumer):
    """Open games appearing, filling up and closing."""

    async def connect(self):
        if self.scope["user"].is_anonymous:
            await self.close()
            return

        self.versions = VersionTracker()
        await self.channel_layer.group_add(LOBBY_GROUP, self.channel_name)
        await self.accept()
        await self.send_json({"type": "connected"})

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(LOBBY_GROUP, self.channel_name)

    async def receive_json(self, content, **kwargs):
        if content.get("type") == "ping":
            await self.send_json({"type": "pong"})

    async def lobby_update(self, event):
        game = event["game"]
        if not self.versions.accept(game["id"], game["version"]):
            return
        await self.send_json({"type": "lobby_update", "game": game})
