"""Upload queue: per-destination FIFO of pending files, one transfer at a time.

All state lives in one ``UploadState`` guarded by ``UploadQueue.lock``. Caller
intents, transport callbacks and push events all mutate it while holding the
lock, and every mutation ends by re-evaluating whether the head item can
start.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any, Optional

from hfsupload.core.output import format_bytes
from hfsupload.core.validation import validate_destination
from hfsupload.models.progress import HTTP_PAYLOAD_TOO_LARGE, TransferOutcome, UploadSummary
from hfsupload.models.upload import PendingItem, QueueEntry, UploadState
from hfsupload.transfer.accept import AcceptPolicy
from hfsupload.transfer.constants import (
    MSG_CONCLUDED,
    MSG_FAILED,
    MSG_PAUSE_NOTICE,
    MSG_REJECTED,
    MSG_TOO_LARGE,
    REFRESH_DELAY,
    SAMPLE_INTERVAL,
)
from hfsupload.transfer.estimator import TransferEstimator
from hfsupload.transfer.negotiator import ConflictNegotiator
from hfsupload.transfer.prompter import Prompter
from hfsupload.transfer.single import SingleTransfer
from hfsupload.transfer.transport import EventSource, Transport

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], Any]], Any]


def _start_timer(delay: float, callback: Callable[[], Any]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def describe_summary(summary: UploadSummary) -> str:
    """Human summary such as ``"3 finished (1.2 MB) – 1 failed"``."""
    parts = []
    if summary.done:
        parts.append(f"{summary.done} finished ({format_bytes(summary.done_bytes)})")
    if summary.errors:
        parts.append(f"{summary.errors} failed")
    return " – ".join(parts) or "nothing uploaded"


class UploadQueue:
    """Orders uploads per destination and drives them one by one."""

    def __init__(
        self,
        transport: Transport,
        events: EventSource,
        prompter: Prompter,
        *,
        policy: Optional[AcceptPolicy] = None,
        skip_existing: bool = False,
        refresh: Optional[Callable[[], Any]] = None,
        refresh_delay: float = REFRESH_DELAY,
        schedule: Scheduler = _start_timer,
        sample_interval: float = SAMPLE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.lock = threading.RLock()
        self.state = UploadState(skip_existing=skip_existing)
        self.transport = transport
        self.prompter = prompter
        self.policy = policy or AcceptPolicy()
        self.refresh = refresh
        self.refresh_delay = refresh_delay
        self.schedule = schedule
        self.estimator = TransferEstimator(self.state, self.lock, interval=sample_interval, clock=clock)
        self.negotiator = ConflictNegotiator(self, events, prompter)

        self.current: Optional[SingleTransfer] = None
        self.watching = False
        self._reload_on_close = False
        self._ever_paused = False
        self._drained = threading.Event()
        self._drained.set()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the speed/ETA sampler."""
        self.estimator.start()

    def close(self) -> None:
        self.estimator.stop()
        with self.lock:
            self.negotiator.reset_channel()

    def wait_drained(self, timeout: Optional[float] = None) -> bool:
        """Block until the queue is empty and no transfer is active."""
        return self._drained.wait(timeout)

    def snapshot(self) -> UploadState:
        """Consistent copy of the state for display."""
        with self.lock:
            return self.state.copy()

    # =========================================================================
    # Caller Intents
    # =========================================================================

    def enqueue(
        self,
        items: Iterable[PendingItem],
        destination: str,
        policy: Optional[AcceptPolicy] = None,
    ) -> None:
        """Queue files for a destination.

        Files failing the accept policy are dropped with one notice for the
        batch. Files whose relative path is already queued for the destination
        are ignored.
        """
        destination = validate_destination(destination)
        accepted, rejected = (policy or self.policy).split(items)
        if rejected:
            self.prompter.alert(MSG_REJECTED, "warning")

        unique: dict[str, PendingItem] = {}
        for item in accepted:
            unique.setdefault(item.relative_path, item)
        if not unique:
            return

        with self.lock:
            entry = self._find_entry(destination)
            if entry is None:
                self.state.queue.append(QueueEntry(destination, list(unique.values())))
                added = len(unique)
            else:
                missing = [i for path, i in unique.items() if entry.find(path) is None]
                entry.entries.extend(missing)
                added = len(missing)
            logger.info("Queued %d file(s) for %s", added, destination)
            self._schedule_next()

    def toggle_pause(self) -> bool:
        """Flip pause. The in-flight transfer always continues.

        Returns:
            The new paused flag.
        """
        with self.lock:
            self.state.paused = not self.state.paused
            logger.info("Queue %s", "paused" if self.state.paused else "resumed")
            if self.state.paused and not self._ever_paused:
                self._ever_paused = True
                self.prompter.alert(MSG_PAUSE_NOTICE, "info")
            self._schedule_next()
            return self.state.paused

    def set_skip_existing(self, skip: bool) -> None:
        """Policy sent with every transfer started from now on."""
        with self.lock:
            self.state.skip_existing = skip

    def clear(self) -> None:
        """Drop every queued file and abort the active transfer."""
        with self.lock:
            self.state.queue.clear()
            if self.current is not None:
                self.current.abort()
            self._schedule_next()

    def remove_from_queue(self, item: PendingItem) -> None:
        """Remove one file; removing the active file aborts its transfer."""
        with self.lock:
            if item is self.state.active:
                if self.current is not None:
                    self.current.abort()
                return
            self._discard(item)
            self._schedule_next()

    def open_view(self) -> None:
        """Mark the transfer view as watched; an idle queue starts fresh counters."""
        with self.lock:
            self.watching = True
            if not self.state.queue:
                self.state.reset_counters()

    def close_view(self) -> None:
        with self.lock:
            self.watching = False
            reload, self._reload_on_close = self._reload_on_close, False
        if reload and self.refresh is not None:
            self.refresh()

    # =========================================================================
    # Scheduling
    # =========================================================================

    def _find_entry(self, destination: str) -> Optional[QueueEntry]:
        for entry in self.state.queue:
            if entry.destination == destination:
                return entry
        return None

    def _discard(self, item: PendingItem) -> bool:
        """Remove an item from its entry, pruning the entry if emptied."""
        for idx, entry in enumerate(self.state.queue):
            if any(queued is item for queued in entry.entries):
                entry.entries.remove(item)
                if not entry.entries:
                    del self.state.queue[idx]
                return True
        return False

    def _schedule_next(self) -> None:
        if not self.state.queue:
            self.negotiator.reset_channel()
            if self.state.active is None:
                self._drained.set()
            return
        if self.state.active is not None or self.state.paused:
            return
        head = self.state.queue[0]
        self._start(head.entries[0], head.destination)

    def _start(self, item: PendingItem, destination: str, resume_offset: int = 0) -> None:
        self._drained.clear()
        self.state.active = item
        self.state.partial_bytes = resume_offset
        self.state.progress = resume_offset / item.size if item.size else 0.0
        channel = self.negotiator.ensure_channel()
        self.current = SingleTransfer(
            item,
            destination,
            transport=self.transport,
            channel=channel,
            skip_existing=self.state.skip_existing,
            resume_offset=resume_offset,
            wait_ready=self.negotiator.wait_ready_hook(),
            on_progress=self._on_progress,
            on_complete=self._on_complete,
        )
        self.current.start()

    def _on_progress(self, transfer: SingleTransfer, delta: int) -> None:
        with self.lock:
            if transfer is not self.current:
                return
            self.state.partial_bytes = transfer.partial_bytes
            self.state.progress = transfer.progress
            self.estimator.add_bytes(delta)
            self.negotiator.on_progress(transfer)

    def _on_complete(self, transfer: SingleTransfer, status: int, error: Optional[BaseException]) -> None:
        with self.lock:
            if transfer is not self.current:
                logger.warning("Ignoring completion of superseded upload %s", transfer.item.relative_path)
                return
            self.current = None
            self.negotiator.on_transfer_end(transfer)
            item = transfer.item

            outcome = TransferOutcome.from_status(status)
            if outcome is TransferOutcome.ABORTED and error is not None and not transfer.aborted:
                outcome = TransferOutcome.FAILED

            if outcome is TransferOutcome.ABORTED and transfer.resume_to is not None:
                self.state.active = None
                self._start(item, transfer.destination, transfer.resume_to)
                return

            if outcome is TransferOutcome.DONE:
                self.state.done_count += 1
                self.state.done_bytes += item.size
                self._reload_on_close = True
                logger.info("Uploaded %s (%s)", item.relative_path, format_bytes(item.size))
            elif outcome is TransferOutcome.SKIPPED:
                logger.info("Skipped existing %s", item.relative_path)
            elif outcome is TransferOutcome.FAILED:
                self._failed(item, status, error)
            else:
                logger.info("Upload of %s cancelled", item.relative_path)

            self._advance(item)

    def _failed(self, item: PendingItem, status: int, error: Optional[BaseException]) -> None:
        self.state.error_count += 1
        logger.warning(
            "Upload of %s failed: %s",
            item.relative_path,
            f"HTTP {status}" if status else error,
        )
        if self.state.error_count > 1:
            return
        message = MSG_FAILED.format(name=item.name)
        if status == HTTP_PAYLOAD_TOO_LARGE:
            message = f"{message}: {MSG_TOO_LARGE}"
        self.prompter.alert(message, "error")

    def _advance(self, item: PendingItem) -> None:
        self.state.active = None
        self.state.partial_bytes = 0
        self.state.progress = None
        found = self._discard(item)
        if found and not self.state.queue:
            self._concluded()
        self._schedule_next()

    def _concluded(self) -> None:
        """The last queued file reached a terminal state."""
        if self.refresh is not None:
            self.schedule(self.refresh_delay, self.refresh)
        self._reload_on_close = False
        summary = self.state.summary
        logger.info("Upload queue drained: %s", describe_summary(summary))
        if self.watching:
            return
        self.prompter.alert(f"{MSG_CONCLUDED} {describe_summary(summary)}", "info")
        self.state.reset_counters()
