# src/kcmaker/core/settings.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .apps import load_apps_config
from .errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "kcmaker.yml"
DEFAULT_APPS_FILES = ("apps.yml", "apps.yaml", "apps.json")


@dataclass
class BuildSettings:
    cwd: Path
    mode: str = "production"
    out_dir: Path = Path("dist")
    config: Optional[Path] = None
    apps: Dict[str, Any] = field(default_factory=dict)
    apps_file: Optional[Path] = None
    defines: Dict[str, str] = field(default_factory=dict)
    esbuild: str = "esbuild"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"{path} is not valid YAML:\n{e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"YAML file is not a mapping: {path}")
    return data


def _opt_str(d: Mapping[str, Any], key: str, path: Path) -> Optional[str]:
    v = d.get(key)
    if v is None:
        return None
    if not isinstance(v, str) or not v:
        raise SettingsError(f"Invalid string for '{key}' in {path}")
    return v


def _str_map(d: Mapping[str, Any], key: str, path: Path) -> Dict[str, Any]:
    v = d.get(key) or {}
    if not isinstance(v, dict):
        raise SettingsError(f"'{key}' must be a mapping in {path}")
    return v


def _define_value(v: Any) -> str:
    # strings are code as written; other YAML scalars become JS literals
    return v if isinstance(v, str) else json.dumps(v)


def load_settings(cwd: Path, overrides: Optional[Mapping[str, Any]] = None) -> BuildSettings:
    """
    Read <cwd>/kcmaker.yml (optional) and apply command-line overrides.
    Overrides with a value of None are ignored.

    AppsConfig precedence: --apps file, `apps_file:`, inline `apps:`,
    then apps.yml / apps.yaml / apps.json next to kcmaker.yml.
    """
    cwd = Path(cwd).resolve()
    path = cwd / SETTINGS_FILE
    raw = _load_yaml(path)
    ov = {k: v for k, v in (overrides or {}).items() if v is not None}

    mode = ov.get("mode") or _opt_str(raw, "mode", path) or "production"
    out_dir = ov.get("out_dir") or _opt_str(raw, "out_dir", path) or "dist"
    config = ov.get("config") or _opt_str(raw, "config", path)
    esbuild = ov.get("esbuild") or _opt_str(raw, "esbuild", path) or "esbuild"
    defines = {str(k): _define_value(v) for k, v in _str_map(raw, "defines", path).items()}

    apps_file = ov.get("apps_file") or _opt_str(raw, "apps_file", path)
    apps: Dict[str, Any] = {}
    apps_path: Optional[Path] = None
    if apps_file:
        apps_path = (cwd / apps_file).resolve()
        apps = load_apps_config(apps_path)
    elif "apps" in raw:
        apps = _str_map(raw, "apps", path)
    else:
        for name in DEFAULT_APPS_FILES:
            if (cwd / name).is_file():
                apps_path = cwd / name
                apps = load_apps_config(apps_path)
                break

    settings = BuildSettings(
        cwd=cwd,
        mode=str(mode),
        out_dir=Path(out_dir),
        config=Path(config) if config else None,
        apps=apps,
        apps_file=apps_path,
        defines=defines,
        esbuild=str(esbuild),
    )
    logger.debug("settings: mode=%s out_dir=%s config=%s apps=%s", settings.mode, settings.out_dir,
                 settings.config, apps_path or ("inline" if apps else "none"))
    return settings


__all__ = ["SETTINGS_FILE", "BuildSettings", "load_settings"]
