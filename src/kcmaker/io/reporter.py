# src/kcmaker/io/reporter.py
from __future__ import annotations

import sys
from typing import Optional, TextIO

from ..compilers.base import CompilationResult


class ResultReporter:
    """Print the compiler report without per-module/per-chunk detail; map outcome to exit status."""

    def __init__(self, stream: Optional[TextIO] = None, colors: bool = False) -> None:
        self.stream = stream
        self.colors = colors

    def report(self, result: CompilationResult) -> int:
        stream = self.stream or sys.stdout
        text = result.to_string(modules=False, chunks=False, colors=self.colors)
        stream.write(text + "\n")
        stream.flush()
        return 1 if result.has_errors else 0


def report(result: CompilationResult, *, stream: Optional[TextIO] = None, colors: bool = False) -> int:
    return ResultReporter(stream=stream, colors=colors).report(result)


__all__ = ["ResultReporter", "report"]
