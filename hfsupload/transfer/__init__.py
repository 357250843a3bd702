"""Upload transfer engine.

- ``UploadQueue`` owns the shared state and runs one transfer at a time
- ``SingleTransfer`` sends one file (tail) with progress and abort
- ``ConflictNegotiator`` reacts to resume offers and status overrides
- ``TransferEstimator`` derives speed and ETA
- ``DropAndPickIntake`` filters picked/dropped files into the pending set
"""

from hfsupload.transfer.accept import AcceptPolicy, normalize_accept
from hfsupload.transfer.estimator import TransferEstimator
from hfsupload.transfer.intake import DropAndPickIntake, collect_files
from hfsupload.transfer.negotiator import ConflictNegotiator
from hfsupload.transfer.prompter import AutoPrompter, ConsolePrompter, Prompter
from hfsupload.transfer.queue import UploadQueue, describe_summary
from hfsupload.transfer.single import SingleTransfer
from hfsupload.transfer.transport import (
    EventSource,
    HttpxEventSource,
    HttpxTransport,
    Transport,
    UploadRequest,
)

__all__ = [
    "AcceptPolicy",
    "normalize_accept",
    "TransferEstimator",
    "DropAndPickIntake",
    "collect_files",
    "ConflictNegotiator",
    "Prompter",
    "AutoPrompter",
    "ConsolePrompter",
    "UploadQueue",
    "describe_summary",
    "SingleTransfer",
    "Transport",
    "EventSource",
    "HttpxTransport",
    "HttpxEventSource",
    "UploadRequest",
]
