"""Core modules for hfsupload."""

from hfsupload.core.client import HFSClient
from hfsupload.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from hfsupload.core.exceptions import (
    ConfigurationError,
    ConnectionError,
    HFSUploadError,
    InvalidURLError,
    NetworkError,
    PermissionDeniedError,
    ProfileNotFoundError,
    ResourceExistsError,
    ResourceNotFoundError,
    RetryExhaustedError,
    ServerUnreachableError,
    TransferAbortedError,
    ValidationError,
)
from hfsupload.core.logging import LogContext, setup_logging
from hfsupload.core.output import (
    OutputFormat,
    console,
    format_bytes,
    format_duration,
    format_percent,
    format_speed,
    print_error,
    print_output,
    print_success,
    print_warning,
)
from hfsupload.core.validation import (
    validate_destination,
    validate_resume_mode,
    validate_server_url,
)

__all__ = [
    # Exceptions
    "HFSUploadError",
    "ConfigurationError",
    "ProfileNotFoundError",
    "ValidationError",
    "InvalidURLError",
    "ConnectionError",
    "NetworkError",
    "ServerUnreachableError",
    "RetryExhaustedError",
    "ResourceNotFoundError",
    "ResourceExistsError",
    "PermissionDeniedError",
    "TransferAbortedError",
    # Validation
    "validate_server_url",
    "validate_destination",
    "validate_resume_mode",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "HFSClient",
    # Output
    "OutputFormat",
    "console",
    "format_bytes",
    "format_speed",
    "format_percent",
    "format_duration",
    "print_output",
    "print_error",
    "print_warning",
    "print_success",
    # Logging
    "setup_logging",
    "LogContext",
]
