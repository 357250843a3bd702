"""Input validation helpers."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from hfsupload.core.exceptions import (
    InvalidURLError,
    PathValidationError,
    ValidationError,
)

RESUME_MODES = ("ask", "always", "never")


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: Server URL as typed by the user.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL is not http(s) or has no host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url or "", "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")

    return url.rstrip("/")


def validate_destination(path: str) -> str:
    """Normalize a remote destination folder to '/a/b/' form.

    Raises:
        ValidationError: If the destination is empty.
    """
    if not path or not path.strip():
        raise ValidationError("Destination is empty", field="destination", value=path)
    path = "/" + path.strip().strip("/")
    return path if path.endswith("/") else path + "/"


def validate_timeout(timeout: int) -> int:
    """Validate request timeout in seconds."""
    if timeout <= 0:
        raise ValidationError(f"Timeout must be positive: {timeout}", field="timeout", value=timeout)
    return timeout


def validate_resume_mode(mode: str) -> str:
    """Validate the resume-offer answering mode."""
    mode = (mode or "").lower()
    if mode not in RESUME_MODES:
        raise ValidationError(
            f"Resume mode must be one of {', '.join(RESUME_MODES)}: {mode}",
            field="resume",
            value=mode,
        )
    return mode


def validate_path_exists(path: Path) -> Path:
    """Ensure a local path exists."""
    if not path.exists():
        raise PathValidationError(str(path), "does not exist")
    return path
