"""
Recurring progress sampler.

Runs a sampling callable on a daemon thread at a fixed interval. Whether a
tick is applied is up to the callable; the controller discards ticks while
nothing is loaded.
"""

import threading
from typing import Any, Callable, Optional

from loguru import logger


class ProgressPoller:
    """Calls sample() every interval seconds until stopped."""

    def __init__(self, sample: Callable[[], Any], interval: float = 1.0):
        self.sample = sample
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampler thread. No-op if already running."""
        with self._lock:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name="progress-poller", daemon=True
            )
            # Ticks only go to the log file, never to the console
            self._thread.silent_logging = True
            self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.sample()
            except Exception:
                logger.exception("Progress sample failed")
