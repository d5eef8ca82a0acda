# src/kcmaker/compilers/base.py
"""
Narrow compiler contract: configuration in, CompilationResult out.

Anything that implements `Compiler.run` can stand in for the bundler.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

_RED = "\x1b[31m"
_YELLOW = "\x1b[33m"
_GREEN = "\x1b[32m"
_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


def _human_size(n: int) -> str:
    if n < 1024:
        return f"{n} bytes"
    if n < 1024 * 1024:
        return f"{n / 1024:.2f} KiB"
    return f"{n / (1024 * 1024):.2f} MiB"


@dataclass(frozen=True)
class Asset:
    name: str
    size: int = 0


@dataclass
class CompilationResult:
    """Outcome of one compiler run (the bundler's "stats")."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    assets: List[Asset] = field(default_factory=list)
    modules: List[str] = field(default_factory=list)
    chunks: List[str] = field(default_factory=list)
    elapsed: float = 0.0  # seconds

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def succeeded(self) -> bool:
        return not self.has_errors

    @property
    def diagnostics_text(self) -> str:
        return self.to_string()

    def to_string(self, *, modules: bool = True, chunks: bool = True, colors: bool = False) -> str:
        def paint(text: str, code: str) -> str:
            return f"{code}{text}{_RESET}" if colors else text

        lines: List[str] = []
        for asset in self.assets:
            lines.append(f"asset {paint(asset.name, _BOLD + _GREEN)} {_human_size(asset.size)} [emitted]")
        if chunks and self.chunks:
            for name in self.chunks:
                lines.append(f"chunk ({name})")
        if modules and self.modules:
            for name in self.modules:
                lines.append(f"  module {name}")

        for w in self.warnings:
            lines.append("")
            lines.append(f"{paint('WARNING', _BOLD + _YELLOW)} in {w}")
        for e in self.errors:
            lines.append("")
            lines.append(f"{paint('ERROR', _BOLD + _RED)} in {e}")

        ms = int(round(self.elapsed * 1000))
        if self.has_errors:
            summary = paint(
                f"compiled with {len(self.errors)} error{'s' if len(self.errors) != 1 else ''} in {ms} ms",
                _RED,
            )
        elif self.has_warnings:
            summary = paint(
                f"compiled with {len(self.warnings)} warning{'s' if len(self.warnings) != 1 else ''} in {ms} ms",
                _YELLOW,
            )
        else:
            summary = paint(f"compiled successfully in {ms} ms", _GREEN)
        if lines:
            lines.append("")
        lines.append(summary)
        return "\n".join(lines)


class Compiler(abc.ABC):
    """Runs one build to completion; not cancellable once started."""

    @abc.abstractmethod
    async def run(self, config: Mapping[str, Any]) -> Optional[CompilationResult]:
        raise NotImplementedError


__all__ = ["Asset", "CompilationResult", "Compiler"]
