from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from games import services
from games.models import Game
from games.redis_lock import LockHeartbeat, LockLost, SingleInstanceLock


class FakeRedis:
    """Just enough of SET NX/XX PX and GET for the lock."""

    def __init__(self):
        self.data = {}

    def set(self, key, value, nx=False, xx=False, px=None):
        if nx and key in self.data:
            return None
        if xx and key not in self.data:
            return None
        self.data[key] = value
        return True

    def get(self, key):
        return self.data.get(key)


def test_only_one_holder():
    client = FakeRedis()
    first = SingleInstanceLock("settler", 30, client=client)
    second = SingleInstanceLock("settler", 30, client=client)

    assert first.acquire()
    assert not second.acquire()
    assert first.renew()
    assert not second.renew()


def test_heartbeat_raises_when_lock_taken_over():
    client = FakeRedis()
    lock = SingleInstanceLock("settler", 30, client=client)
    lock.acquire()

    now = [0.0]
    heartbeat = LockHeartbeat(lock, every_seconds=5, clock=lambda: now[0])
    heartbeat.tick()

    now[0] = 6.0
    heartbeat.tick()

    client.data["settler"] = "someone-else"
    now[0] = 12.0
    with pytest.raises(LockLost):
        heartbeat.tick()


@pytest.mark.django_db
def test_settle_command_single_pass(alice, session_for):
    start = timezone.now() - timedelta(hours=1)
    game = services.create_game(session_for(alice), Game.TYPE_LOTTERY, 40, now=start)

    out = StringIO()
    call_command("settle_lotteries", stdout=out)

    game.refresh_from_db()
    assert game.status == Game.STATUS_CANCELLED
    assert "cancelled=1" in out.getvalue()
