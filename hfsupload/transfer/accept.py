"""Accept policy: which files a destination takes.

The policy string is a list of patterns separated by ``,`` or ``|``:

- ``.png`` matches names ending with the extension (case-insensitive)
- ``image/*`` matches MIME types starting with ``image/``; a bare ``*`` matches all
- anything else must equal the MIME type exactly
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Optional

from hfsupload.models.upload import PendingItem

logger = logging.getLogger(__name__)

SEPARATORS = re.compile(r"\s*[|,]\s*")

Matcher = Callable[[str, str], bool]


def normalize_accept(accept: Optional[str]) -> Optional[str]:
    """Turn an accept string into the comma form file pickers expect."""
    if accept is None:
        return None
    return accept.replace("|", ",").replace(" ", "")


def compile_pattern(pattern: str) -> Matcher:
    """Compile one pattern into a ``(name, mime_type) -> bool`` matcher."""
    if pattern.startswith("."):
        suffix = pattern.lower()
        return lambda name, mime_type: name.lower().endswith(suffix)

    if pattern.endswith("*"):
        prefix = pattern[:-1].lower()
        return lambda name, mime_type: mime_type.lower().startswith(prefix)

    exact = pattern.lower()
    return lambda name, mime_type: mime_type.lower() == exact


@dataclass
class AcceptPolicy:
    """Compiled accept policy. An empty policy accepts everything."""

    source: Optional[str] = None
    _matchers: list[Matcher] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.source:
            patterns = [p for p in SEPARATORS.split(self.source.strip()) if p]
            self._matchers = [compile_pattern(p) for p in patterns]

    @classmethod
    def parse(cls, accept: Optional[str]) -> AcceptPolicy:
        return cls(accept)

    @property
    def accepts_all(self) -> bool:
        return not self._matchers

    def accepts(self, item: PendingItem) -> bool:
        """Test an item's declared name and MIME type."""
        if not self._matchers:
            return True
        return any(match(item.name, item.mime_type) for match in self._matchers)

    def split(self, items: Iterable[PendingItem]) -> tuple[list[PendingItem], list[PendingItem]]:
        """Partition items into (accepted, rejected), keeping order."""
        accepted: list[PendingItem] = []
        rejected: list[PendingItem] = []
        for item in items:
            (accepted if self.accepts(item) else rejected).append(item)
        if rejected:
            logger.debug(
                "Accept policy %r rejected %d file(s): %s",
                self.source,
                len(rejected),
                ", ".join(i.relative_path for i in rejected),
            )
        return accepted, rejected
