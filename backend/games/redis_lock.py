import time
import uuid

import redis
from django.conf import settings


class LockLost(RuntimeError):
    pass


def get_redis():
    return redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


class SingleInstanceLock:
    """
    Keeps a background worker to one running copy.

    acquire: SET NX PX
    renew:   SET XX PX, only while we hold the token
    release: compare-and-delete
    """

    def __init__(self, key: str, ttl_seconds: int, client=None):
        self.key = key
        self.ttl_ms = int(ttl_seconds * 1000)
        self.token = uuid.uuid4().hex
        self.r = client or get_redis()

    def acquire(self) -> bool:
        return bool(self.r.set(self.key, self.token, nx=True, px=self.ttl_ms))

    def owned(self) -> bool:
        return self.r.get(self.key) == self.token

    def renew(self) -> bool:
        if not self.owned():
            return False
        return bool(self.r.set(self.key, self.token, xx=True, px=self.ttl_ms))

    def release(self) -> bool:
        pipe = self.r.pipeline()
        try:
            pipe.watch(self.key)
            if pipe.get(self.key) == self.token:
                pipe.multi()
                pipe.delete(self.key)
                pipe.execute()
                return True
            pipe.unwatch()
        except redis.WatchError:
            pass
        finally:
            pipe.reset()
        return False


class LockHeartbeat:
    def __init__(self, lock: SingleInstanceLock, every_seconds: float = 5.0, clock=time.monotonic):
        self.lock = lock
        self.every = every_seconds
        self.clock = clock
        self._next = clock() + every_seconds

    def tick(self):
        now = self.clock()
        if now < self._next:
            return
        if not self.lock.renew():
            raise LockLost(f"Lost lock {self.lock.key}")
        self._next = now + self.every
