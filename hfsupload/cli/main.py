"""Main CLI entry point for hfs-upload."""

from __future__ import annotations

import click

from hfsupload import __version__
from hfsupload.cli.common import Context, global_options, handle_errors
from hfsupload.cli.config_cmd import config
from hfsupload.cli.folder import mkdir
from hfsupload.cli.upload import upload
from hfsupload.core.output import print_output, print_success

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="hfs-upload")
def cli() -> None:
    """hfs-upload - Resumable, queued uploads to an HFS file server.

    Get started:

      hfs-upload config init              # Create config file

      hfs-upload upload /docs/ ./report.pdf

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(upload)
cli.add_command(mkdir)


@cli.command("ping")
@global_options
@handle_errors
def ping(ctx: Context) -> None:
    """Check server connectivity."""
    result = ctx.get_client().ping()
    print_success(f"Server reachable: {result['url']}")
    print_output(
        {
            "status": result["status"],
            "server": result["server"],
            "latency": f"{result['latency_ms']}ms",
        },
        format=ctx.output_format,
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
