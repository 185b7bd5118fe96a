"""Idempotent application of game snapshots.

Snapshots arrive from two channels (lobby polling and websocket push),
possibly duplicated or out of order. Each carries the game's monotonic
version; only a strictly newer version replaces what was applied before.
"""


class VersionTracker:
    def __init__(self):
        self._versions = {}

    def seen(self, game_id):
        return self._versions.get(str(game_id), 0)

    def is_newer(self, game_id, version) -> bool:
        return int(version) > self.seen(game_id)

    def accept(self, game_id, version) -> bool:
        """Record version if newer. False means drop the snapshot."""
        if not self.is_newer(game_id, version):
            return False
        self._versions[str(game_id)] = int(version)
        return True

    def forget(self, game_id):
        self._versions.pop(str(game_id), None)
