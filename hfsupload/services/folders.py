"""Remote folder operations used around an upload: capabilities, listing, mkdir."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hfsupload.core.exceptions import ResourceExistsError
from hfsupload.core.validation import validate_destination
from hfsupload.models.progress import HTTP_CONFLICT
from hfsupload.models.upload import DestinationProps

from .base import BaseService

logger = logging.getLogger(__name__)

FILE_LIST_PATH = "/~/api/get_file_list"


class FolderService(BaseService):
    """Service for destination folders."""

    def get_file_list(self, uri: str, *, limit: int | None = None) -> dict[str, Any]:
        """Fetch a folder listing.

        Args:
            uri: Folder URI, e.g. ``/docs/``.
            limit: Max entries to return (0 for properties only).

        Returns:
            Raw listing with ``list`` and ``props`` keys when the server sends them.
        """
        params: dict[str, Any] = {"uri": validate_destination(uri)}
        if limit is not None:
            params["limit"] = limit
        data = self._get(FILE_LIST_PATH, params=params)
        return data if isinstance(data, dict) else {"list": data}

    def get_props(self, uri: str) -> DestinationProps:
        """Capabilities of a destination: upload/comment permission and accept policy."""
        data = self.get_file_list(uri, limit=0)
        props = data.get("props")
        return DestinationProps.model_validate(props if isinstance(props, dict) else data)

    def refresh(self, uri: str) -> int:
        """Re-read a folder listing after uploads and return its entry count."""
        entries = self.get_file_list(uri).get("list") or []
        logger.debug("Listing of %s has %d entries", uri, len(entries))
        return len(entries)

    def create_folder(self, uri: str, name: str) -> str:
        """Create a subfolder.

        Returns:
            URI of the new folder.

        Raises:
            ResourceExistsError: If a folder with the same name exists.
        """
        uri = validate_destination(uri)
        try:
            self._call("create_folder", uri=uri, name=name)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == HTTP_CONFLICT:
                raise ResourceExistsError("folder", uri + name) from e
            raise
        logger.info("Created folder %s in %s", name, uri)
        return self._build_uri(uri, name)
