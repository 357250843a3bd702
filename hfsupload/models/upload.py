"""Queue and transfer state models.

``PendingItem``, ``QueueEntry`` and ``UploadState`` are plain dataclasses owned
by the upload queue. ``ResumeOffer`` and ``DestinationProps`` validate payloads
pushed or returned by the server.
"""

from __future__ import annotations

import mimetypes
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import Field

from hfsupload.models.base import BaseModel
from hfsupload.models.progress import UploadSummary

# =============================================================================
# Queue Items
# =============================================================================


def normalize_relative_path(relative_path: str) -> str:
    """Use forward slashes and collapse doubled separators."""
    normalized = relative_path.replace("\\", "/")
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    return normalized.lstrip("/")


@dataclass(eq=False)
class PendingItem:
    """A local file waiting to be uploaded.

    Items compare by identity; the queue deduplicates them by
    ``(destination, relative_path)``.
    """

    path: Path
    relative_path: str
    size: int
    mime_type: str = ""
    comment: Optional[str] = None

    @classmethod
    def from_path(
        cls,
        path: Path,
        relative_path: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> PendingItem:
        """Build an item from a local file, reading its size and MIME type."""
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            relative_path=normalize_relative_path(relative_path or path.name),
            size=path.stat().st_size,
            mime_type=mime_type or "",
            comment=comment,
        )

    @property
    def name(self) -> str:
        """Base name of the file."""
        return self.relative_path.rsplit("/", 1)[-1]


@dataclass
class QueueEntry:
    """Files queued for one destination, in enqueue order."""

    destination: str
    entries: list[PendingItem] = field(default_factory=list)

    def find(self, relative_path: str) -> Optional[PendingItem]:
        for item in self.entries:
            if item.relative_path == relative_path:
                return item
        return None


# =============================================================================
# Upload State
# =============================================================================


@dataclass
class UploadState:
    """Process-wide transfer state, mutated only by the upload queue."""

    queue: list[QueueEntry] = field(default_factory=list)
    adding: list[PendingItem] = field(default_factory=list)
    active: Optional[PendingItem] = None
    partial_bytes: int = 0
    progress: Optional[float] = None
    paused: bool = False
    skip_existing: bool = False
    done_count: int = 0
    done_bytes: int = 0
    error_count: int = 0
    speed: float = 0.0
    eta_seconds: int = 0

    @property
    def queued_bytes(self) -> int:
        """Total size of every queued item, the active one included."""
        return sum(item.size for entry in self.queue for item in entry.entries)

    @property
    def in_queue(self) -> int:
        """Number of queued items not counting the active one."""
        total = sum(len(entry.entries) for entry in self.queue)
        return total - (1 if self.active is not None else 0)

    @property
    def summary(self) -> UploadSummary:
        return UploadSummary(done=self.done_count, done_bytes=self.done_bytes, errors=self.error_count)

    def reset_counters(self) -> None:
        self.done_count = 0
        self.done_bytes = 0
        self.error_count = 0

    def copy(self) -> UploadState:
        """Copy with independent lists, for reading outside the queue lock."""
        return replace(
            self,
            queue=[QueueEntry(e.destination, list(e.entries)) for e in self.queue],
            adding=list(self.adding),
        )


# =============================================================================
# Server Payloads
# =============================================================================


class ResumeOffer(BaseModel):
    """A partial upload the server can continue."""

    size: int = Field(0, description="Bytes already stored on the server")
    expires: Optional[datetime] = Field(None, description="When the partial file is discarded")

    @classmethod
    def from_event(cls, data: Any, relative_path: str) -> Optional[ResumeOffer]:
        """Extract the offer for one file from an ``upload.resumable`` payload.

        The payload maps relative paths to ``{size, expires}``; a bare size with
        a top-level ``expires`` is accepted too.
        """
        if not isinstance(data, dict):
            return None
        entry = data.get(relative_path)
        if isinstance(entry, dict):
            return cls.model_validate(entry)
        if isinstance(entry, (int, float)) and not isinstance(entry, bool):
            return cls.model_validate({"size": int(entry), "expires": data.get("expires")})
        return None

    def seconds_left(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds until expiry, or None when the server gave no expiry."""
        if self.expires is None:
            return None
        now = time.time() if now is None else now
        return max(0.0, self.expires.timestamp() - now)


class DestinationProps(BaseModel):
    """Capabilities a destination folder presents to the client."""

    can_upload: bool = False
    can_comment: bool = False
    can_delete: bool = False
    accept: Optional[str] = None
