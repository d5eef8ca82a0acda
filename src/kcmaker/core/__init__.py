# src/kcmaker/core/__init__.py
"""
Configuration resolution and build execution.

Re-exports the pieces a caller normally needs:
  discover_entries -> compose_config -> ConfigLoader -> BuildRunner
"""

from __future__ import annotations

from .composer import compose_config, merge_config
from .contracts import AppEntry, BuildMode
from .discovery import discover_entries, entry_points
from .loader import ConfigLoader, load_build_config
from .pipeline import BuildPipeline, build
from .runner import BuildRunner, prepare_config

__all__ = [
    "AppEntry",
    "BuildMode",
    "discover_entries",
    "entry_points",
    "compose_config",
    "merge_config",
    "ConfigLoader",
    "load_build_config",
    "BuildRunner",
    "prepare_config",
    "BuildPipeline",
    "build",
]
