# src/kcmaker/plugins.py
"""
Plugin descriptors carried in a configuration's `plugins`, `resolve.plugins`
and `optimization.minimizer` lists.

These are plain value objects: they describe intent and the compiler adapter
decides how to honour them. Frozen dataclasses so two independently composed
configurations compare equal.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

APPS_CONFIG_GLOBAL = "APPS_CONFIG"


@dataclass(frozen=True)
class CleanOutputPlugin:
    """Empty the output directory before emitting."""


@dataclass(frozen=True)
class CssExtractPlugin:
    """Emit imported stylesheets as separate files named after the entry."""
    filename: str = "[name].css"


@dataclass(frozen=True)
class TsconfigPathsPlugin:
    config_file: str = "tsconfig.json"


@dataclass(frozen=True)
class DefinePlugin:
    """Compile-time constant substitution: identifier -> code literal."""
    definitions: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AppsConfigPlugin(DefinePlugin):
    """The single APPS_CONFIG injection owned by the build runner."""

    @classmethod
    def from_apps(cls, apps_config: Mapping[str, Any]) -> "AppsConfigPlugin":
        return cls(definitions={APPS_CONFIG_GLOBAL: serialize_apps_config(apps_config)})


@dataclass(frozen=True)
class Minifier:
    comments: bool = False
    extract_comments: bool = False


def serialize_apps_config(apps_config: Mapping[str, Any]) -> str:
    """Compact JSON, key order preserved, as embedded in the bundle."""
    return json.dumps(dict(apps_config), ensure_ascii=False, separators=(",", ":"))


__all__ = [
    "APPS_CONFIG_GLOBAL",
    "CleanOutputPlugin",
    "CssExtractPlugin",
    "TsconfigPathsPlugin",
    "DefinePlugin",
    "AppsConfigPlugin",
    "Minifier",
    "serialize_apps_config",
]
