"""Exception hierarchy for hfsupload.

Provides typed exceptions for different failure modes with clear error messages.
Per-file upload failures are not raised; they are classified and counted by the
upload queue. These exceptions cover configuration, RPC calls and CLI errors.
"""

from __future__ import annotations

from typing import Any


class HFSUploadError(Exception):
    """Base exception for all hfsupload errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(HFSUploadError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(HFSUploadError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class PathValidationError(ValidationError):
    """Path validation failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path: {path} - {reason}", field="path", value=path)
        self.path = path
        self.reason = reason


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(HFSUploadError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RetryExhaustedError(ConnectionError):
    """All retry attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(HFSUploadError):
    """Error related to a remote file or folder."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceNotFoundError(ResourceError):
    """Requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            resource_type,
            resource_id,
        )


class ResourceExistsError(ResourceError):
    """Resource already exists."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} already exists: {resource_id}",
            resource_type,
            resource_id,
        )


class PermissionDeniedError(ResourceError):
    """Server refused the operation on this resource."""

    def __init__(self, resource: str, operation: str = "access"):
        super().__init__(f"Permission denied to {operation} {resource}", "path", resource)
        self.operation = operation


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(HFSUploadError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class TransferAbortedError(UploadError):
    """Raised inside a transport when the client aborts an in-flight request."""

    def __init__(self, file_path: str | None = None):
        super().__init__("Transfer aborted", file_path)
