# src/kcmaker/compilers/__init__.py
from __future__ import annotations

from .base import Asset, CompilationResult, Compiler
from .esbuild import EsbuildCompiler

__all__ = ["Asset", "CompilationResult", "Compiler", "EsbuildCompiler"]
