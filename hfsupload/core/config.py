"""Configuration management for hfsupload.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from hfsupload.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "hfsupload"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TIMEOUT = 30
DEFAULT_RESUME_MODE = "ask"

# Environment variable names
ENV_URL = "HFS_URL"
ENV_PROFILE = "HFS_PROFILE"
ENV_VERIFY_SSL = "HFS_VERIFY_SSL"
ENV_TIMEOUT = "HFS_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for an HFS server."""

    url: str
    verify_ssl: bool = True
    timeout: int = DEFAULT_TIMEOUT
    skip_existing: bool = False
    resume: str = DEFAULT_RESUME_MODE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "skip_existing": self.skip_existing,
            "resume": self.resume,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            skip_existing=data.get("skip_existing", False),
            resume=data.get("resume", DEFAULT_RESUME_MODE),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in data.get("profiles", {}).items():
                    config.profiles[name] = Profile.from_dict(pdata)
            except Exception as e:
                raise ConfigurationError(f"Failed to load config: {e}")

        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT)))

            base = config.profiles.get("default")
            config.profiles["default"] = Profile(
                url=url,
                verify_ssl=verify_ssl,
                timeout=timeout,
                skip_existing=base.skip_existing if base else False,
                resume=base.resume if base else DEFAULT_RESUME_MODE,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_TIMEOUT,
        skip_existing: bool = False,
        resume: str = DEFAULT_RESUME_MODE,
    ) -> Profile:
        """Add or update a profile.

        Returns:
            Created profile.
        """
        profile = Profile(
            url=url,
            verify_ssl=verify_ssl,
            timeout=timeout,
            skip_existing=skip_existing,
            resume=resume,
        )
        self.profiles[name] = profile
        return profile

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name
