"""
Run the weekly sync on a fixed interval until asked to stop.
"""
from __future__ import annotations

import logging
import signal
import threading
import time
from datetime import timedelta

logger = logging.getLogger(__name__)


class SyncScheduler:
    """
    Calls ``engine.sync_once()`` right away and then every ``interval``.

    Ticks run on the calling thread, one after another: a slow tick delays
    the next one instead of overlapping it. An exception inside a tick is
    logged and the schedule carries on.
    """

    def __init__(self, engine, interval: timedelta, stop_event: threading.Event | None = None):
        self.engine = engine
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.ticks = 0

    def install_signal_handlers(self) -> None:
        """SIGINT / SIGTERM end the loop after the running tick."""
        def _handler(signum, frame):
            logger.info("Received %s, shutting down lizto-sync...", signal.Signals(signum).name)
            self.stop()

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)

    def stop(self) -> None:
        self.stop_event.set()

    def _tick(self) -> None:
        self.ticks += 1
        try:
            self.engine.sync_once()
        except Exception:
            logger.exception("Error in periodic sync")

    def run(self) -> None:
        period = self.interval.total_seconds()
        logger.info("Sync active every %s", self.interval)
        while not self.stop_event.is_set():
            started = time.monotonic()
            self._tick()
            elapsed = time.monotonic() - started
            if elapsed > period:
                logger.warning(
                    "Sync took %.0fs, longer than the %.0fs interval", elapsed, period
                )
            if self.stop_event.wait(max(0.0, period - elapsed)):
                break
        logger.info("Scheduler stopped after %d tick(s)", self.ticks)
