"""Throughput and ETA estimation for the upload queue."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import ContextManager, Optional

from hfsupload.models.upload import UploadState
from hfsupload.transfer.constants import MIN_SAMPLE_WINDOW, SAMPLE_INTERVAL

logger = logging.getLogger(__name__)


class TransferEstimator:
    """Samples bytes sent and refreshes ``speed`` and ``eta_seconds``.

    Transfers feed byte deltas through ``add_bytes``; ``tick`` runs every
    ``interval`` seconds on a daemon thread once ``start`` is called. Both run
    under the owning queue's lock.
    """

    def __init__(
        self,
        state: UploadState,
        lock: ContextManager,
        *,
        interval: float = SAMPLE_INTERVAL,
        min_window: float = MIN_SAMPLE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.state = state
        self.lock = lock
        self.interval = interval
        self.min_window = min_window
        self.clock = clock
        self._bytes_sent = 0
        self._sampled_at = clock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def add_bytes(self, count: int) -> None:
        with self.lock:
            self._bytes_sent += count

    def tick(self) -> None:
        """Take one sample.

        A window shorter than ``min_window`` keeps accumulating while a speed is
        already known, instead of reporting a noisy value.
        """
        with self.lock:
            now = self.clock()
            passed = now - self._sampled_at
            if passed <= 0 or (passed < self.min_window and self.state.speed):
                return
            self.state.speed = self._bytes_sent / passed
            self._bytes_sent = 0
            self._sampled_at = now

            left = self.state.queued_bytes - self.state.partial_bytes
            self.state.eta_seconds = round(left / self.state.speed) if self.state.speed else 0

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="upload-estimator", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.tick()
