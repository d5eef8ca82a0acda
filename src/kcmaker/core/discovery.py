# src/kcmaker/core/discovery.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from .contracts import ENTRY_EXTENSIONS, PLATFORMS, AppEntry
from .errors import DiscoveryError

logger = logging.getLogger(__name__)

# Directory names never descended into
_PRUNE = {"node_modules", "__pycache__"}

_ENTRY_FILES = {f"index.{ext}" for ext in ENTRY_EXTENSIONS}


def apps_dir(cwd: Path) -> Path:
    """Where entry points live, relative to the project working directory."""
    return Path(cwd) / "src" / "apps"


def _pruned(name: str) -> bool:
    return name in _PRUNE or name.startswith(".")


class EntryDiscovery:
    """Deterministic scan for <app>/<platform>/index.{ts,js} under a base directory."""

    def __init__(self, base_dir: Path, platforms: Sequence[str] = PLATFORMS) -> None:
        self.base_dir = Path(base_dir)
        self.platforms = tuple(platforms)

    def _match(self, rel_parts: Tuple[str, ...]) -> bool:
        # need at least <app>/<platform>/<file>
        if len(rel_parts) < 3:
            return False
        return rel_parts[-1] in _ENTRY_FILES and rel_parts[-2] in self.platforms

    def discover(self) -> List[AppEntry]:
        root = self.base_dir
        if not root.is_dir():
            logger.debug("entry directory %s does not exist", root)
            return []

        out: List[AppEntry] = []
        for cur, dirs, files in os.walk(root):
            dirs[:] = sorted(d for d in dirs if not _pruned(d))
            for fn in sorted(files):
                p = Path(cur) / fn
                rel_parts = p.relative_to(root).parts
                if not self._match(rel_parts):
                    continue
                out.append(AppEntry(app_name=rel_parts[-3], platform=rel_parts[-2], source_path=p))

        out.sort(key=lambda e: e.source_path.relative_to(root).as_posix())
        logger.debug("discovered %d entry point(s) under %s", len(out), root)
        return out


def discover_entries(base_dir: Path) -> List[AppEntry]:
    return EntryDiscovery(base_dir).discover()


def entry_points(entries: Iterable[AppEntry]) -> Dict[str, str]:
    """
    Map entry keys ("<app>/customize.<platform>") to POSIX source paths.

    Two files claiming the same key (index.ts next to index.js, or one app
    name under two parent folders) are rejected rather than overwritten.
    """
    mapping: Dict[str, str] = {}
    for entry in entries:
        src = entry.source_path.as_posix()
        prev = mapping.get(entry.key)
        if prev is not None:
            raise DiscoveryError(f"Duplicate entry point '{entry.key}': {prev} and {src}")
        mapping[entry.key] = src
    return mapping


__all__ = ["apps_dir", "EntryDiscovery", "discover_entries", "entry_points"]
