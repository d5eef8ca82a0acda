# src/kcmaker/core/contracts.py
"""
Shared value types for a build: the mode selector and discovered entries.

Keep these small and immutable; every component passes them around.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Tuple

from .errors import ConfigCompositionError

PLATFORMS: Tuple[str, ...] = ("desktop", "mobile")
ENTRY_EXTENSIONS: Tuple[str, ...] = ("ts", "js")


class BuildMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: Any) -> "BuildMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigCompositionError(f"Invalid build mode: {value}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class AppEntry:
    """One entry point: src/apps/<app_name>/<platform>/index.<ext>."""
    app_name: str
    platform: str
    source_path: Path

    @property
    def key(self) -> str:
        return f"{self.app_name}/customize.{self.platform}"


__all__ = ["PLATFORMS", "ENTRY_EXTENSIONS", "BuildMode", "AppEntry"]
