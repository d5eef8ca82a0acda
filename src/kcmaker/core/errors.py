# src/kcmaker/core/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class KcmakerError(RuntimeError):
    """Base exception for build orchestration failures."""


class DiscoveryError(KcmakerError):
    """No usable entry points (or colliding entry keys) under src/apps."""


class ConfigCompositionError(KcmakerError):
    """Unsupported build mode or otherwise uncomposable configuration."""


class ConfigLoadError(KcmakerError):
    """A user configuration module could not be turned into a configuration."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None and str(self.path) not in message:
            message = f"{message} ({self.path})"
        super().__init__(message)


class ConfigModuleNotFound(ConfigLoadError):
    """The configuration file does not exist."""


class ConfigModuleExecError(ConfigLoadError):
    """The configuration module (or its factory) raised."""


class ConfigExportError(ConfigLoadError):
    """The module exported something that is neither a mapping nor a factory."""


class ConfigValidationError(KcmakerError):
    """AppsConfig is missing or malformed for a discovered app."""


class SettingsError(KcmakerError):
    """Malformed kcmaker.yml or apps file."""


class CompilationError(KcmakerError):
    """The compiler reported errors. Normally reported rather than raised."""


class InternalError(KcmakerError):
    """Defect in the compiler contract (e.g. no result at all)."""


class TypeGenError(KcmakerError):
    """Type definition generation failed."""


__all__ = [
    "KcmakerError",
    "DiscoveryError",
    "ConfigCompositionError",
    "ConfigLoadError",
    "ConfigModuleNotFound",
    "ConfigModuleExecError",
    "ConfigExportError",
    "ConfigValidationError",
    "SettingsError",
    "CompilationError",
    "InternalError",
    "TypeGenError",
]
