"""Intake of local files picked or dropped by the user.

Accepted files land in the queue's "adding" set first; ``commit`` moves the
whole set into the queue for a destination.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from hfsupload.models.upload import PendingItem
from hfsupload.transfer.accept import AcceptPolicy
from hfsupload.transfer.constants import MSG_REJECTED
from hfsupload.transfer.queue import UploadQueue

logger = logging.getLogger(__name__)


def collect_files(root: Path) -> list[Path]:
    """Recursively collect regular files under a folder, sorted.

    Raises:
        ValueError: If root is not a directory.
    """
    if not root.is_dir():
        raise ValueError(f"Not a directory: {root}")

    # is_file() is False for broken symlinks
    files = [path for path in root.rglob("*") if path.is_file()]
    return sorted(files)


class DropAndPickIntake:
    """Builds pending items from pickers and drops, filtered by accept policy."""

    def __init__(self, queue: UploadQueue, policy: Optional[AcceptPolicy] = None) -> None:
        self.queue = queue
        self.policy = policy or queue.policy

    @property
    def adding(self) -> list[PendingItem]:
        with self.queue.lock:
            return list(self.queue.state.adding)

    @property
    def total_size(self) -> int:
        with self.queue.lock:
            return sum(item.size for item in self.queue.state.adding)

    # =========================================================================
    # Sources
    # =========================================================================

    def add_files(self, paths: Iterable[Path]) -> list[PendingItem]:
        """File picker: each file is identified by its bare name."""
        return self._add([PendingItem.from_path(Path(p)) for p in paths])

    def add_folder(self, root: Path) -> list[PendingItem]:
        """Folder picker: relative paths start with the folder's own name."""
        return self._add(self._folder_items(Path(root)))

    def add_dropped(self, paths: Iterable[Path]) -> list[PendingItem]:
        """Drop: any mix of files and folders."""
        items: list[PendingItem] = []
        for path in map(Path, paths):
            if path.is_dir():
                items.extend(self._folder_items(path))
            else:
                items.append(PendingItem.from_path(path))
        return self._add(items)

    @staticmethod
    def _folder_items(root: Path) -> list[PendingItem]:
        root = root.resolve()
        return [
            PendingItem.from_path(path, f"{root.name}/{path.relative_to(root).as_posix()}")
            for path in collect_files(root)
        ]

    def _add(self, items: list[PendingItem]) -> list[PendingItem]:
        accepted, rejected = self.policy.split(items)
        if rejected:
            self.queue.prompter.alert(MSG_REJECTED, "warning")
        with self.queue.lock:
            self.queue.state.adding.extend(accepted)
        logger.debug("Added %d file(s) to the pending set", len(accepted))
        return accepted

    # =========================================================================
    # Pending Set
    # =========================================================================

    def remove(self, item: PendingItem) -> None:
        with self.queue.lock:
            adding = self.queue.state.adding
            if item in adding:
                adding.remove(item)

    def set_comment(self, item: PendingItem, comment: Optional[str]) -> None:
        """Attach a comment; empty text clears it."""
        with self.queue.lock:
            item.comment = comment or None

    def clear(self) -> None:
        with self.queue.lock:
            self.queue.state.adding.clear()

    def commit(self, destination: str) -> int:
        """Send the whole pending set to the queue.

        Returns:
            Number of files handed to the queue.
        """
        with self.queue.lock:
            items = list(self.queue.state.adding)
            self.queue.state.adding.clear()
        if items:
            self.queue.enqueue(items, destination, self.policy)
        return len(items)
