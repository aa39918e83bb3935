from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class RecurrenceScheduler:
    """Calls ``job`` every ``interval_s`` seconds on a daemon thread until stopped."""

    def __init__(self, job: Callable[[], object], interval_s: float = 3600, run_immediately: bool = True) -> None:
        self._job = job
        self._interval_s = interval_s
        self._run_immediately = run_immediately
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._loop, name="recurrence-scan", daemon=True)
            self._thread.start()
        logger.info("Recurrence scheduler started (every %ss)", self._interval_s)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info("Recurrence scheduler stopped")

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def run_once(self) -> None:
        try:
            self._job()
        except Exception:  # noqa: BLE001
            logger.exception("Recurrence scan failed")

    def _loop(self) -> None:
        if self._run_immediately:
            self.run_once()
        while not self._stop.wait(self._interval_s):
            self.run_once()
