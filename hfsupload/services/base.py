"""Base service with common methods for all HFS services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hfsupload.core.client import HFSClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "HFSClient") -> None:
        """Initialize service with an HFS client.

        Args:
            client: HFSClient instance
        """
        self.client = client

    def _call(self, name: str, /, **params: Any) -> Any:
        """Invoke a server API method.

        Args:
            name: API method name
            **params: Method parameters

        Returns:
            Decoded JSON result
        """
        return self.client.api_call(name, params)

    def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data."""
        resp = self.client.get(path, **kwargs)
        return resp.json()

    @staticmethod
    def _build_uri(*parts: str) -> str:
        """Join folder segments into a '/a/b/' URI."""
        inner = "/".join(p.strip("/") for p in parts if p and p.strip("/"))
        return f"/{inner}/" if inner else "/"
