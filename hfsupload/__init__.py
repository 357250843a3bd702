"""hfsupload - Resumable, queued uploads to an HFS file server.

This package provides a transfer engine and a command-line host for it:
- Per-destination FIFO queue with pause, removal and skip-existing policy
- Resumable uploads negotiated over a server notification channel
- Accept-policy filtering of picked or dropped files
- Live speed and ETA estimation
"""

__version__ = "0.1.0"

from hfsupload.core.client import HFSClient
from hfsupload.core.config import Config, Profile
from hfsupload.core.exceptions import (
    ConfigurationError,
    ConnectionError,
    HFSUploadError,
    NetworkError,
    ResourceExistsError,
    ValidationError,
)
from hfsupload.transfer.intake import DropAndPickIntake
from hfsupload.transfer.queue import UploadQueue

__all__ = [
    "__version__",
    "HFSClient",
    "Config",
    "Profile",
    "UploadQueue",
    "DropAndPickIntake",
    "HFSUploadError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceExistsError",
    "ValidationError",
]
