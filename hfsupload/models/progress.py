"""Outcome and summary models for upload runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

HTTP_CONFLICT = 409
HTTP_PAYLOAD_TOO_LARGE = 413


class TransferOutcome(Enum):
    """Terminal state of one transfer request."""

    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"
    ABORTED = "aborted"

    @classmethod
    def from_status(cls, status: int) -> TransferOutcome:
        """Classify a final HTTP status.

        0 means the client aborted the request; 409 means the server skipped an
        existing file because skip-existing was requested.
        """
        if not status:
            return cls.ABORTED
        if status == HTTP_CONFLICT:
            return cls.SKIPPED
        if status >= 400:
            return cls.FAILED
        return cls.DONE


@dataclass
class UploadSummary:
    """Cumulative counters of an upload run."""

    done: int = 0
    done_bytes: int = 0
    errors: int = 0

    @property
    def success(self) -> bool:
        """True when no file failed."""
        return self.errors == 0

    @property
    def total_mb(self) -> float:
        """Return megabytes uploaded."""
        return self.done_bytes / (1024 * 1024)
