# src/kcmaker/io/__init__.py
from __future__ import annotations

from .reporter import ResultReporter, report

__all__ = ["ResultReporter", "report"]
