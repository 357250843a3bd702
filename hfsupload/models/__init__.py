"""Data models for hfsupload."""

from hfsupload.models.base import BaseModel
from hfsupload.models.progress import (
    HTTP_CONFLICT,
    HTTP_PAYLOAD_TOO_LARGE,
    TransferOutcome,
    UploadSummary,
)
from hfsupload.models.upload import (
    DestinationProps,
    PendingItem,
    QueueEntry,
    ResumeOffer,
    UploadState,
)

__all__ = [
    "BaseModel",
    "HTTP_CONFLICT",
    "HTTP_PAYLOAD_TOO_LARGE",
    "TransferOutcome",
    "UploadSummary",
    "PendingItem",
    "QueueEntry",
    "UploadState",
    "ResumeOffer",
    "DestinationProps",
]
