# src/kcmaker/__init__.py
"""kcmaker: entry discovery, config composition and esbuild-driven builds for kintone customizations."""

from __future__ import annotations

__version__ = "0.3.0"

# core before compilers: the esbuild adapter raises core errors
from .core import (
    AppEntry,
    BuildMode,
    BuildPipeline,
    BuildRunner,
    ConfigLoader,
    build,
    compose_config,
    discover_entries,
)
from .compilers import CompilationResult, Compiler, EsbuildCompiler

__all__ = [
    "__version__",
    "AppEntry",
    "BuildMode",
    "BuildPipeline",
    "BuildRunner",
    "CompilationResult",
    "Compiler",
    "ConfigLoader",
    "EsbuildCompiler",
    "build",
    "compose_config",
    "discover_entries",
]
