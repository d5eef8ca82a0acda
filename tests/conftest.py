"""
Shared fixtures: tiny kintone project trees and a fake compiler.

The fake compiler stands in for esbuild: it writes one file per entry point
into the output directory and substitutes DefinePlugin constants as
`var NAME = VALUE;` lines, which is enough to observe what a real bundle
would embed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

from kcmaker.compilers.base import Asset, CompilationResult, Compiler
from kcmaker.plugins import DefinePlugin


def write(p: Path, content: str = "") -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


def make_entry(root: Path, app: str, platform: str, ext: str = "ts") -> Path:
    return write(
        root / "src" / "apps" / app / platform / f"index.{ext}",
        f"console.log(APPS_CONFIG['{app}']);\n",
    )


class FakeCompiler(Compiler):
    def __init__(self, errors: Optional[List[str]] = None, result: Any = "emit") -> None:
        self.errors = list(errors or [])
        self.result = result
        self.calls: List[Mapping[str, Any]] = []

    async def run(self, config: Mapping[str, Any]) -> Optional[CompilationResult]:
        self.calls.append(config)
        if self.result is None:
            return None

        outdir = Path(config["output"]["path"])
        defines: Dict[str, str] = {}
        for plugin in config.get("plugins") or []:
            if isinstance(plugin, DefinePlugin):
                defines.update(plugin.definitions)

        assets: List[Asset] = []
        if not self.errors:
            for key, src in config["entry"].items():
                body = "".join(f"var {k} = {v};\n" for k, v in defines.items())
                body += Path(src).read_text(encoding="utf-8")
                out = write(outdir / f"{key}.js", body)
                assets.append(Asset(name=f"{key}.js", size=out.stat().st_size))

        return CompilationResult(
            errors=list(self.errors),
            assets=assets,
            modules=sorted(config["entry"].values()),
            chunks=sorted(config["entry"].keys()),
        )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()
