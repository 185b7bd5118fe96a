import signal
import time

from django.conf import settings
from django.core.management.base import BaseCommand

from games.redis_lock import LockHeartbeat, LockLost, SingleInstanceLock
from games.services import settle_expired_lotteries

LOCK_KEY = "games:lottery:settler"


class Command(BaseCommand):
    help = "Draw or cancel lotteries whose deadline has passed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--loop",
            action="store_true",
            help="Keep running, holding a Redis single-instance lock",
        )
        parser.add_argument(
            "--interval",
            type=float,
            default=5,
            help="Seconds between passes in --loop mode (default: 5)",
        )
        parser.add_argument(
            "--lock-ttl",
            type=int,
            default=settings.SETTLE_LOCK_TTL,
            help="Lock TTL in seconds",
        )

    def report(self, summary):
        if summary["drawn"] or summary["cancelled"]:
            self.stdout.write(self.style.SUCCESS(
                f"[SETTLE] drawn={len(summary['drawn'])} cancelled={len(summary['cancelled'])}"
            ))

    def handle(self, *args, **options):
        if not options["loop"]:
            summary = settle_expired_lotteries()
            self.report(summary)
            self.stdout.write(f"[SETTLE] Done: {summary}")
            return

        interval = options["interval"]
        lock = SingleInstanceLock(LOCK_KEY, options["lock_ttl"])

        if not lock.acquire():
            self.stdout.write(self.style.WARNING("[SETTLE] Another settler already running. Exiting."))
            return

        self.stdout.write(self.style.SUCCESS(f"[SETTLE] Lock acquired, checking every {interval}s"))
        heartbeat = LockHeartbeat(lock, every_seconds=max(1.0, options["lock_ttl"] / 3))

        running = True

        def shutdown(*_):
            nonlocal running
            running = False
            self.stdout.write(self.style.WARNING("[SETTLE] Shutdown requested."))

        signal.signal(signal.SIGINT, shutdown)
        signal.signal(signal.SIGTERM, shutdown)

        try:
            while running:
                heartbeat.tick()
                self.report(settle_expired_lotteries())
                time.sleep(interval)
        except LockLost:
            self.stdout.write(self.style.ERROR("[SETTLE] Lock lost. Another instance may have taken over."))
        finally:
            if lock.release():
                self.stdout.write(self.style.SUCCESS("[SETTLE] Lock released."))
