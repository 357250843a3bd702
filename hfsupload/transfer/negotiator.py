"""Server-pushed resume offers and status overrides.

The negotiator owns the notification channel of the current queue cycle. Push
events race against the in-flight request, so every action first checks that
the transfer it targets is still the queue's current one.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from hfsupload.core.output import format_bytes, format_percent
from hfsupload.models.upload import ResumeOffer
from hfsupload.transfer.constants import (
    CHANNEL_PREFIX,
    EVENT_RESUMABLE,
    EVENT_STATUS,
    MSG_RESUME,
)
from hfsupload.transfer.prompter import Dismiss, Prompter
from hfsupload.transfer.single import SingleTransfer
from hfsupload.transfer.transport import EventSource, Subscription

if TYPE_CHECKING:
    from hfsupload.transfer.queue import UploadQueue

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _PendingOffer:
    transfer: SingleTransfer
    size: int
    dismiss: Optional[Dismiss] = None
    dismissed: bool = False


def new_channel_id() -> str:
    return CHANNEL_PREFIX + secrets.token_hex(8)


class ConflictNegotiator:
    """Turns ``upload.resumable`` and ``upload.status`` events into actions."""

    def __init__(
        self,
        queue: UploadQueue,
        events: EventSource,
        prompter: Prompter,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.queue = queue
        self.events = events
        self.prompter = prompter
        self.clock = clock
        self.channel: Optional[str] = None
        self._subscription: Optional[Subscription] = None
        self._pending: Optional[_PendingOffer] = None

    # =========================================================================
    # Channel Lifecycle
    # =========================================================================

    def ensure_channel(self) -> str:
        """Return the channel of this queue cycle, subscribing on first use."""
        if self.channel is None:
            self.channel = new_channel_id()
            logger.debug("Subscribing to notification channel %s", self.channel)
            self._subscription = self.events.subscribe(self.channel, self.handle_event)
        return self.channel

    def wait_ready_hook(self) -> Optional[Callable[[], Any]]:
        """Connection wait for the current channel, run by the sending thread."""
        if self._subscription is None:
            return None
        return self._subscription.wait_connected

    def reset_channel(self) -> None:
        """Forget the channel so the next cycle uses a fresh id."""
        self._dismiss_pending()
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self.channel is not None:
            logger.debug("Closed notification channel %s", self.channel)
        self.channel = None

    # =========================================================================
    # Transfer Hooks
    # =========================================================================

    def on_progress(self, transfer: SingleTransfer) -> None:
        """Drop the resume question once the request passed the offered size."""
        pending = self._pending
        if pending and pending.transfer is transfer and transfer.partial_bytes >= pending.size:
            logger.debug("Resume offer for %s overtaken by progress", transfer.item.relative_path)
            self._dismiss_pending()

    def on_transfer_end(self, transfer: SingleTransfer) -> None:
        pending = self._pending
        if pending and pending.transfer is transfer:
            self._dismiss_pending()

    # =========================================================================
    # Events
    # =========================================================================

    def handle_event(self, name: str, data: Any) -> None:
        with self.queue.lock:
            transfer = self.queue.current
            if transfer is None or transfer.finished:
                return
            if name == EVENT_RESUMABLE:
                self._offer(transfer, data)
            elif name == EVENT_STATUS:
                self._override(transfer, data)

    def _offer(self, transfer: SingleTransfer, data: Any) -> None:
        item = transfer.item
        try:
            offer = ResumeOffer.from_event(data, item.relative_path)
        except ValidationError as e:
            logger.warning("Ignoring malformed resume offer for %s: %s", item.relative_path, e)
            return
        if offer is None or not offer.size:
            return
        if offer.size > item.size:
            logger.debug("Ignoring stale resume offer for %s: %d > %d", item.relative_path, offer.size, item.size)
            return
        if transfer.partial_bytes >= offer.size:
            return
        timeout = offer.seconds_left(self.clock())
        if timeout == 0:
            logger.debug("Ignoring expired resume offer for %s", item.relative_path)
            return

        self._dismiss_pending()
        pending = _PendingOffer(transfer, offer.size)
        self._pending = pending
        message = MSG_RESUME.format(percent=format_percent(offer.size / item.size), size=format_bytes(offer.size))
        dismiss = self.prompter.confirm(
            f"{item.name}: {message}",
            timeout=timeout,
            on_answer=lambda accepted: self._answered(pending, accepted),
        )
        pending.dismiss = dismiss

    def _answered(self, pending: _PendingOffer, accepted: bool) -> None:
        with self.queue.lock:
            if self._pending is pending:
                self._pending = None
            if pending.dismissed or not accepted:
                return
            transfer = pending.transfer
            if transfer is not self.queue.current or transfer.finished or transfer.aborted:
                logger.debug("Resume of %s accepted too late", transfer.item.relative_path)
                return
            logger.info("Resuming %s from byte %d", transfer.item.relative_path, pending.size)
            transfer.abort(resume_to=pending.size)

    def _override(self, transfer: SingleTransfer, data: Any) -> None:
        code = data.get(transfer.item.relative_path) if isinstance(data, dict) else None
        if not isinstance(code, int) or isinstance(code, bool):
            return
        logger.info("Server reported status %d for %s", code, transfer.item.relative_path)
        transfer.status_override = code
        if code >= 400:
            transfer.abort()

    def _dismiss_pending(self) -> None:
        pending, self._pending = self._pending, None
        if pending is None:
            return
        pending.dismissed = True
        if pending.dismiss is not None:
            pending.dismiss()
