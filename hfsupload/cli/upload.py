"""Upload command for hfs-upload."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import httpx
from rich.progress import Progress, TaskID

from hfsupload.cli.common import Context, ExitCode, global_options, handle_errors
from hfsupload.core.exceptions import HFSUploadError
from hfsupload.core.logging import LogContext
from hfsupload.core.output import (
    create_progress,
    format_bytes,
    format_duration,
    format_speed,
    print_error,
    print_output,
    print_warning,
)
from hfsupload.core.validation import RESUME_MODES, validate_destination
from hfsupload.models.upload import UploadState
from hfsupload.services.folders import FolderService
from hfsupload.transfer.accept import AcceptPolicy
from hfsupload.transfer.intake import DropAndPickIntake
from hfsupload.transfer.prompter import ConsolePrompter
from hfsupload.transfer.queue import UploadQueue
from hfsupload.transfer.transport import HttpxEventSource, HttpxTransport

logger = logging.getLogger(__name__)

# Seconds between progress bar refreshes
POLL_INTERVAL = 0.25


def queue_status(state: UploadState) -> str:
    """One-line queue status: items waiting, ETA and speed."""
    parts = []
    if state.in_queue:
        parts.append(f"{state.in_queue} in queue")
    if state.eta_seconds:
        parts.append(format_duration(state.eta_seconds, length=2))
    if state.speed:
        parts.append(format_speed(state.speed))
    if state.paused:
        parts.append("paused")
    return ", ".join(parts)


def _render(progress: Progress, task: TaskID, state: UploadState) -> None:
    active = state.active
    if active is None:
        progress.update(task, description="Waiting", total=None, status=queue_status(state))
        return
    progress.update(
        task,
        description=active.relative_path,
        total=active.size or 1,
        completed=state.partial_bytes if active.size else 0,
        status=queue_status(state),
    )


def watch_queue(queue: UploadQueue) -> None:
    """Render progress until the queue drains."""
    with create_progress() as progress:
        task = progress.add_task("Starting", total=None, status="")
        while not queue.wait_drained(POLL_INTERVAL):
            _render(progress, task, queue.snapshot())


@click.command("upload")
@click.argument("destination")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option("--comment", "-c", default=None, help="Comment attached to every file")
@click.option(
    "--skip-existing/--no-skip-existing",
    default=None,
    help="Let the server skip files that already exist",
)
@click.option(
    "--resume",
    "resume_mode",
    type=click.Choice(RESUME_MODES),
    default=None,
    help="How to answer server offers to resume a partial upload",
)
@click.option("--accept", default=None, help="Accept policy overriding the destination's, e.g. '.png,image/*'")
@global_options
@handle_errors
def upload(
    ctx: Context,
    destination: str,
    paths: tuple[Path, ...],
    comment: Optional[str],
    skip_existing: Optional[bool],
    resume_mode: Optional[str],
    accept: Optional[str],
) -> None:
    """Upload files and folders to DESTINATION.

    Folders keep their structure under DESTINATION. Files are sent one at a
    time, in order; Ctrl-C cancels the remaining ones.

    Example:
        hfs-upload upload /docs/ report.pdf ./photos
        hfs-upload upload /backup/ big.iso --resume always --skip-existing
    """
    destination = validate_destination(destination)
    profile = ctx.get_profile()
    client = ctx.get_client()
    folders = FolderService(client)

    props = folders.get_props(destination)
    if not props.can_upload:
        print_error(f"No upload permission for {destination}")
        sys.exit(ExitCode.PERMISSION_ERROR)
    if comment and not props.can_comment:
        print_warning("Comments are not allowed in this folder, ignoring --comment")
        comment = None

    def refresh() -> None:
        try:
            folders.refresh(destination)
        except (HFSUploadError, httpx.HTTPError) as e:
            logger.warning("Could not refresh %s: %s", destination, e)

    transport = HttpxTransport(client)
    queue = UploadQueue(
        transport,
        HttpxEventSource(client),
        ConsolePrompter(resume_mode or profile.resume),
        policy=AcceptPolicy.parse(accept if accept is not None else props.accept),
        skip_existing=profile.skip_existing if skip_existing is None else skip_existing,
        refresh=refresh,
    )
    intake = DropAndPickIntake(queue)
    items = intake.add_dropped(paths)
    if not items:
        print_warning("Nothing to upload")
        return
    for item in items:
        intake.set_comment(item, comment)

    queue.open_view()
    queue.start()
    with LogContext("upload", logger, destination=destination, files=len(items)):
        try:
            intake.commit(destination)
            watch_queue(queue)
        except KeyboardInterrupt:
            print_warning("Interrupted, cancelling remaining uploads")
            queue.clear()
            queue.wait_drained(timeout=10)
        finally:
            queue.close()
            transport.close()

    state = queue.snapshot()
    print_output(
        {
            "destination": destination,
            "uploaded": state.done_count,
            "size": format_bytes(state.done_bytes),
            "failed": state.error_count,
        },
        format=ctx.output_format,
        title="Upload concluded",
    )
    if state.error_count:
        sys.exit(ExitCode.GENERAL_ERROR)
