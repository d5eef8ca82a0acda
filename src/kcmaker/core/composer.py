# src/kcmaker/core/composer.py
from __future__ import annotations

import logging
from dataclasses import is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ..plugins import (
    CleanOutputPlugin,
    CssExtractPlugin,
    DefinePlugin,
    Minifier,
    TsconfigPathsPlugin,
)
from .contracts import AppEntry, BuildMode
from .discovery import entry_points
from .errors import DiscoveryError

logger = logging.getLogger(__name__)

Configuration = Dict[str, Any]

RESOLVE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".json"]


def _is_descriptor(value: Any) -> bool:
    return is_dataclass(value) and not isinstance(value, type)


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Configuration:
    """
    Overlay merge:
      - mapping + mapping -> merged key by key (recursively)
      - list + list       -> concatenated (base first); a plugin descriptor
                             already present in base is not added again
      - anything else     -> overlay wins
    Keys only in `base` are inherited. Inputs are not mutated.
    """
    out: Configuration = dict(base)
    for key, value in overlay.items():
        cur = out.get(key)
        if isinstance(cur, Mapping) and isinstance(value, Mapping):
            out[key] = merge_config(cur, value)
        elif isinstance(cur, list) and isinstance(value, list):
            out[key] = [*cur, *(v for v in value if not (_is_descriptor(v) and v in cur))]
        else:
            out[key] = value
    return out


def _base_config(
    entries: Sequence[AppEntry],
    mode: BuildMode,
    cwd: Path,
    out_dir: Path,
    defines: Optional[Mapping[str, str]],
) -> Configuration:
    plugins: list = [
        CleanOutputPlugin(),
        CssExtractPlugin(filename="[name].css"),
    ]
    if defines:
        plugins.append(DefinePlugin(definitions=dict(defines)))

    return {
        "mode": mode.value,
        "target": ["web", "es2023"],
        "entry": entry_points(entries),
        "output": {
            "filename": "[name].js",
            "path": str((cwd / out_dir).resolve()),
        },
        "optimization": {
            "emitOnErrors": False,
        },
        "cache": {
            "type": "filesystem",
            "cacheDirectory": str(cwd / "node_modules" / ".cache" / "kcmaker"),
        },
        "resolve": {
            "extensions": list(RESOLVE_EXTENSIONS),
            "plugins": [TsconfigPathsPlugin(config_file="tsconfig.json")],
        },
        "module": {
            "rules": [
                {"test": r"\.tsx?$", "exclude": "node_modules", "loader": "ts-loader"},
                {"test": r"\.css$", "use": ["css-extract", "css-loader"]},
                {"test": r"\.s[ac]ss$", "use": ["css-extract", "css-loader", "sass-loader"]},
            ],
        },
        "plugins": plugins,
    }


def _production_overlay() -> Configuration:
    return {
        "optimization": {
            "minimize": True,
            "minimizer": [Minifier(comments=False, extract_comments=False)],
        },
    }


def _development_overlay() -> Configuration:
    return {"devtool": "inline-source-map"}


_OVERLAYS = {
    BuildMode.PRODUCTION: _production_overlay,
    BuildMode.DEVELOPMENT: _development_overlay,
}


def compose_config(
    entries: Sequence[AppEntry],
    mode: Union[BuildMode, str],
    *,
    cwd: Union[str, Path],
    out_dir: Union[str, Path] = "dist",
    defines: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """Base configuration for `entries` with the overlay for `mode` merged on top."""
    if not entries:
        raise DiscoveryError(f"No entry points found under {Path(cwd) / 'src' / 'apps'}")
    build_mode = BuildMode.parse(mode)

    base = _base_config(entries, build_mode, Path(cwd), Path(out_dir), defines)
    config = merge_config(base, _OVERLAYS[build_mode]())
    logger.debug("composed %s configuration with %d entry point(s)", build_mode, len(config["entry"]))
    return config


__all__ = ["Configuration", "RESOLVE_EXTENSIONS", "merge_config", "compose_config"]
