# src/kcmaker/core/loader.py
"""
User configuration loader.

A configuration file may export either:
  - a mapping (used as-is for every mode), or
  - a callable taking the BuildMode and returning a mapping.

Python modules are imported by file path; the exported value is the module's
`default` attribute when present, otherwise the module itself (which is
neither a mapping nor callable and is rejected). YAML/JSON files are static
exports.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Mapping, Optional, Union

import yaml

from .contracts import BuildMode
from .errors import (
    ConfigExportError,
    ConfigModuleExecError,
    ConfigModuleNotFound,
)

logger = logging.getLogger(__name__)

_STATIC_SUFFIXES = {".yml", ".yaml", ".json"}

Importer = Callable[[Path], Any]


@dataclass(frozen=True)
class StaticConfig:
    config: Mapping[str, Any]
    path: Path

    def resolve(self, mode: BuildMode) -> Mapping[str, Any]:
        return self.config


@dataclass(frozen=True)
class ConfigFactory:
    factory: Callable[[BuildMode], Any]
    path: Path

    def resolve(self, mode: BuildMode) -> Mapping[str, Any]:
        try:
            result = self.factory(mode)
        except Exception as e:
            raise ConfigModuleExecError(
                f"Config factory raised for mode '{mode}': {e}", self.path
            ) from e
        if not isinstance(result, Mapping):
            raise ConfigExportError(
                f"Config factory returned {type(result).__name__}, expected a mapping", self.path
            )
        return result


ConfigExport = Union[StaticConfig, ConfigFactory]


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    return f"kcmaker_user_config_{digest}"


def _import_python(path: Path) -> ModuleType:
    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, str(path))
    if spec is None or spec.loader is None:
        raise ConfigModuleExecError("Cannot create an import spec for config module", path)
    mod = importlib.util.module_from_spec(spec)
    sys.modules[name] = mod
    try:
        spec.loader.exec_module(mod)
    except Exception as e:
        sys.modules.pop(name, None)
        raise ConfigModuleExecError(f"Failed to import config module {path}:\n{e}", path) from e
    return mod


def _import_static(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigModuleExecError(f"Failed to read config file {path}:\n{e}", path) from e


def import_config_module(path: Path) -> Any:
    """Default importer: Python modules by file path, YAML/JSON as data."""
    if path.suffix.lower() in _STATIC_SUFFIXES:
        return _import_static(path)
    return _import_python(path)


def classify_export(value: Any, path: Path) -> ConfigExport:
    """Unwrap a `default` export and decide between factory and static object."""
    if isinstance(value, ModuleType) and hasattr(value, "default"):
        value = value.default
    elif isinstance(value, Mapping) and set(value.keys()) == {"default"}:
        value = value["default"]

    if callable(value):
        return ConfigFactory(factory=value, path=path)
    if isinstance(value, Mapping):
        return StaticConfig(config=value, path=path)
    raise ConfigExportError(f"Unexpected export type from config: {type(value).__name__}", path)


class ConfigLoader:
    """Path in, configuration out; the importer is swappable for tests."""

    def __init__(self, importer: Optional[Importer] = None) -> None:
        self.importer = importer or import_config_module

    def resolve_path(self, path: Union[str, Path], cwd: Optional[Union[str, Path]] = None) -> Path:
        base = Path(cwd) if cwd is not None else Path.cwd()
        return (base / Path(path)).resolve()

    def load_export(self, path: Union[str, Path], cwd: Optional[Union[str, Path]] = None) -> ConfigExport:
        config_path = self.resolve_path(path, cwd)
        if not config_path.is_file():
            raise ConfigModuleNotFound(f"Config module not found: {config_path}", config_path)
        logger.debug("loading build config from %s", config_path)
        return classify_export(self.importer(config_path), config_path)

    def load(
        self,
        path: Union[str, Path],
        mode: Union[BuildMode, str],
        *,
        cwd: Optional[Union[str, Path]] = None,
    ) -> Mapping[str, Any]:
        export = self.load_export(path, cwd)
        return export.resolve(BuildMode.parse(mode))


def load_build_config(
    path: Union[str, Path],
    mode: Union[BuildMode, str],
    *,
    cwd: Optional[Union[str, Path]] = None,
) -> Mapping[str, Any]:
    return ConfigLoader().load(path, mode, cwd=cwd)


__all__ = [
    "StaticConfig",
    "ConfigFactory",
    "ConfigExport",
    "import_config_module",
    "classify_export",
    "ConfigLoader",
    "load_build_config",
]
