"""Folder commands for hfs-upload."""

from __future__ import annotations

import sys

import click

from hfsupload.cli.common import Context, ExitCode, global_options, handle_errors
from hfsupload.core.exceptions import ResourceExistsError
from hfsupload.core.output import print_error, print_success
from hfsupload.services.folders import FolderService


@click.command("mkdir")
@click.argument("uri")
@click.argument("name")
@global_options
@handle_errors
def mkdir(ctx: Context, uri: str, name: str) -> None:
    """Create folder NAME inside URI.

    Example:
        hfs-upload mkdir /docs/ reports
    """
    service = FolderService(ctx.get_client())
    try:
        created = service.create_folder(uri, name)
    except ResourceExistsError:
        print_error("Folder with same name already exists")
        sys.exit(ExitCode.GENERAL_ERROR)

    print_success(f"Successfully created {created}")
