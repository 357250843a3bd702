"""Service layer for HFS API operations."""

from __future__ import annotations

from .base import BaseService
from .folders import FolderService

__all__ = [
    "BaseService",
    "FolderService",
]
