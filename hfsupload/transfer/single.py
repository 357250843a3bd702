"""One resumable upload request for one queued file."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional

from hfsupload.models.upload import PendingItem
from hfsupload.transfer.transport import TransferHandle, Transport, UploadRequest

logger = logging.getLogger(__name__)

ProgressHook = Callable[["SingleTransfer", int], None]
CompleteHook = Callable[["SingleTransfer", int, Optional[BaseException]], None]


class SingleTransfer:
    """Uploads ``item`` to ``destination`` starting at ``resume_offset``.

    Progress is published as ``partial_bytes`` (bytes sent by this request
    plus the offset, so totals stay continuous across a resume) and
    ``progress`` (fraction of the whole file). ``on_progress`` receives the
    byte delta of each report; ``on_complete`` receives the final status,
    where a server status override replaces the transport's own status.
    """

    def __init__(
        self,
        item: PendingItem,
        destination: str,
        *,
        transport: Transport,
        channel: str,
        skip_existing: bool = False,
        resume_offset: int = 0,
        wait_ready: Optional[Callable[[], Any]] = None,
        on_progress: ProgressHook,
        on_complete: CompleteHook,
    ) -> None:
        self.item = item
        self.destination = destination
        self.transport = transport
        self.channel = channel
        self.skip_existing = skip_existing
        self.resume_offset = resume_offset
        self.wait_ready = wait_ready
        self.on_progress = on_progress
        self.on_complete = on_complete

        self.partial_bytes = resume_offset
        self.status_override = 0
        self.resume_to: Optional[int] = None
        self.aborted = False
        self.finished = False
        self._sent = 0
        self._handle: Optional[TransferHandle] = None

    @property
    def progress(self) -> float:
        if not self.item.size:
            return 1.0 if self.finished else 0.0
        return min(1.0, self.partial_bytes / self.item.size)

    def build_request(self) -> UploadRequest:
        """Request for the file tail ``[resume_offset, size)``."""
        params = {
            "channel": self.channel,
            "resume": str(self.resume_offset),
            "comment": self.item.comment or "",
            "skipExisting": "1" if self.skip_existing else "0",
        }
        return UploadRequest(
            destination=self.destination,
            params=params,
            path=self.item.path,
            filename=self.item.relative_path,
            offset=self.resume_offset,
            size=self.item.size,
            wait_ready=self.wait_ready,
        )

    def start(self) -> None:
        logger.info(
            "Uploading %s to %s%s",
            self.item.relative_path,
            self.destination,
            f" from byte {self.resume_offset}" if self.resume_offset else "",
        )
        self._handle = self.transport.send(self.build_request(), self._progressed, self._completed)

    def abort(self, resume_to: Optional[int] = None) -> None:
        """Terminate the request.

        Args:
            resume_to: When set, the queue restarts this item from that offset
                instead of advancing once the abort completes.
        """
        if self.finished:
            return
        self.aborted = True
        self.resume_to = resume_to
        if self._handle is not None:
            self._handle.abort()

    def _progressed(self, sent: int) -> None:
        delta = sent - self._sent
        if delta <= 0:
            return
        self._sent = sent
        self.partial_bytes = self.resume_offset + sent
        self.on_progress(self, delta)

    def _completed(self, status: int, error: Optional[BaseException] = None) -> None:
        if self.finished:
            return
        self.finished = True
        self.on_complete(self, self.status_override or status, error)
