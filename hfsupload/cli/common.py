"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click
import httpx

from hfsupload.core.client import HFSClient
from hfsupload.core.config import Config, Profile
from hfsupload.core.exceptions import ConfigurationError, HFSUploadError, ProfileNotFoundError
from hfsupload.core.logging import setup_logging
from hfsupload.core.output import OutputFormat, print_error

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.client: Optional[HFSClient] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    def get_profile(self) -> Profile:
        """Get the selected profile.

        Raises:
            ConfigurationError: If no profile configured.
        """
        if self.config is None:
            self.config = Config.load()

        try:
            return self.config.get_profile(self.profile_name)
        except ProfileNotFoundError:
            raise ConfigurationError(
                f"Profile '{self.profile_name or 'default'}' not found. "
                "Run 'hfs-upload config init' or set HFS_URL."
            )

    def get_client(self) -> HFSClient:
        """Get or create the HTTP client for the selected profile."""
        if self.client is not None:
            return self.client

        profile = self.get_profile()
        self.client = HFSClient(
            base_url=profile.url,
            timeout=profile.timeout,
            verify_ssl=profile.verify_ssl,
        )
        return self.client


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="HFS_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Only log errors",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable debug logging",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        if ctx.config is None:
            ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exit codes."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except HFSUploadError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except httpx.HTTPStatusError as e:
            print_error(f"HTTP {e.response.status_code}: {e.request.url}")
            sys.exit(ExitCode.NETWORK_ERROR)
        except click.ClickException:
            raise

    return wrapper  # type: ignore


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    NETWORK_ERROR = 3
    PERMISSION_ERROR = 4
    USER_CANCELLED = 5
