# src/kcmaker/compilers/esbuild.py
"""
Compiler adapter for the `esbuild` binary.

Translates the known configuration keys into command-line flags, runs the
binary once, and folds its stderr diagnostics and metafile into a
CompilationResult. Keys esbuild has no equivalent for (the filesystem cache)
are passed over silently; module rules it cannot honour become warnings.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.errors import ConfigCompositionError
from ..plugins import (
    CleanOutputPlugin,
    CssExtractPlugin,
    DefinePlugin,
    Minifier,
    TsconfigPathsPlugin,
)
from .base import Asset, CompilationResult, Compiler

logger = logging.getLogger(__name__)

# Loaders whose job esbuild does natively
_NATIVE_LOADERS = {
    "ts-loader",
    "babel-loader",
    "esbuild-loader",
    "css-loader",
    "css-extract",
    "style-loader",
}

_PLATFORMS = {"web": "browser", "browser": "browser", "node": "node"}

_SOURCEMAPS = {
    "inline-source-map": "--sourcemap=inline",
    "source-map": "--sourcemap",
    "hidden-source-map": "--sourcemap=external",
}

_MARKER = re.compile(r"^\s*(?:✘|▲|X|!)\s*\[(ERROR|WARNING)\]\s*(.*)$")
_SUMMARY = re.compile(r"^\s*\d+\s+(?:errors?|warnings?)(?:\s+and\s+\d+\s+(?:errors?|warnings?))?\s*$")


def _clear_dir_contents(d: Path) -> None:
    if not d.is_dir():
        return
    for child in d.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def parse_diagnostics(stderr: str) -> Tuple[List[str], List[str]]:
    """Split esbuild's stderr into (errors, warnings), one string per message."""
    errors: List[str] = []
    warnings: List[str] = []
    kind: Optional[str] = None
    block: List[str] = []

    def flush() -> None:
        if kind is None:
            return
        while block and not block[-1].strip():
            block.pop()
        text = "\n".join(block)
        (errors if kind == "ERROR" else warnings).append(text)

    for line in stderr.splitlines():
        m = _MARKER.match(line)
        if m:
            flush()
            kind = m.group(1)
            block = [m.group(2).strip()]
            continue
        if _SUMMARY.match(line):
            continue
        if kind is not None:
            block.append(line.rstrip())
    flush()
    return errors, warnings


def _rule_loaders(rule: Mapping[str, Any]) -> List[str]:
    names: List[str] = []
    if rule.get("loader"):
        names.append(str(rule["loader"]))
    use = rule.get("use") or []
    if isinstance(use, (str, Mapping)):
        use = [use]
    for u in use:
        if isinstance(u, Mapping):
            u = u.get("loader", "")
        names.append(str(u))
    return names


class EsbuildCompiler(Compiler):
    def __init__(self, binary: str = "esbuild", cwd: Optional[Path] = None) -> None:
        self.binary = binary
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()

    def output_dir(self, config: Mapping[str, Any]) -> Optional[Path]:
        """Absolute output directory; relative paths are taken from the project directory."""
        output = config.get("output")
        if not isinstance(output, Mapping) or not output.get("path"):
            return None
        return (self.cwd / output["path"]).resolve()

    def _check_clean_target(self, outdir: Path, config: Mapping[str, Any]) -> None:
        # never empty the project itself or anything holding entry sources
        project = self.cwd.resolve()
        if project.is_relative_to(outdir):
            raise ConfigCompositionError(
                f"Refusing to clean output directory {outdir}: it contains the project directory {project}"
            )
        for src in (config.get("entry") or {}).values():
            source = (self.cwd / src).resolve()
            if source.is_relative_to(outdir):
                raise ConfigCompositionError(
                    f"Refusing to clean output directory {outdir}: it contains the entry source {source}"
                )

    def build_args(self, config: Mapping[str, Any], metafile: Path) -> Tuple[List[str], List[str]]:
        """Return (argv without the binary, translation warnings)."""
        args: List[str] = []
        notes: List[str] = []

        for key, src in (config.get("entry") or {}).items():
            args.append(f"{key}={src}")
        args.append("--bundle")

        outdir = self.output_dir(config)
        if outdir is not None:
            args.append(f"--outdir={outdir}")

        targets = config.get("target") or []
        if isinstance(targets, str):
            targets = [targets]
        es_targets = []
        for t in targets:
            if t in _PLATFORMS:
                args.append(f"--platform={_PLATFORMS[t]}")
            else:
                es_targets.append(t)
        if es_targets:
            args.append(f"--target={','.join(es_targets)}")

        mode = config.get("mode")
        if mode:
            args.append(f"--define:process.env.NODE_ENV={json.dumps(str(mode))}")

        for plugin in config.get("plugins") or []:
            if isinstance(plugin, DefinePlugin):
                for name, value in plugin.definitions.items():
                    args.append(f"--define:{name}={value}")
            elif isinstance(plugin, CssExtractPlugin):
                if plugin.filename != "[name].css":
                    notes.append(f"CssExtractPlugin filename {plugin.filename!r} ignored; esbuild names CSS after the entry")
            elif isinstance(plugin, CleanOutputPlugin):
                pass
            else:
                notes.append(f"plugin {type(plugin).__name__} has no esbuild equivalent; skipped")

        optimization = config.get("optimization") or {}
        minimizers = optimization.get("minimizer") or []
        if optimization.get("minimize"):
            args.append("--minify")
            if any(isinstance(m, Minifier) and not m.comments for m in minimizers):
                args.append("--legal-comments=none")

        devtool = config.get("devtool")
        if devtool:
            flag = _SOURCEMAPS.get(str(devtool))
            if flag:
                args.append(flag)
            else:
                args.append("--sourcemap")
                notes.append(f"devtool {devtool!r} mapped to a linked source map")

        resolve = config.get("resolve") or {}
        if resolve.get("extensions"):
            args.append(f"--resolve-extensions={','.join(resolve['extensions'])}")
        for plugin in resolve.get("plugins") or []:
            if isinstance(plugin, TsconfigPathsPlugin):
                tsconfig = self.cwd / plugin.config_file
                if tsconfig.is_file():
                    args.append(f"--tsconfig={tsconfig}")

        for rule in (config.get("module") or {}).get("rules") or []:
            for loader in _rule_loaders(rule):
                if loader and loader not in _NATIVE_LOADERS:
                    notes.append(f"module rule {rule.get('test')!s}: loader {loader!r} is not supported by esbuild")

        args.append(f"--metafile={metafile}")
        args.append("--log-level=warning")
        args.append("--color=false")
        return args, notes

    def _read_metafile(self, metafile: Path, outdir: Optional[Path]) -> Tuple[List[Asset], List[str], List[str]]:
        if not metafile.is_file():
            return [], [], []
        meta: Dict[str, Any] = json.loads(metafile.read_text(encoding="utf-8"))

        def rel(p: str) -> str:
            path = (self.cwd / p).resolve()
            if outdir is not None:
                try:
                    return path.relative_to(outdir).as_posix()
                except ValueError:
                    pass
            return p

        assets: List[Asset] = []
        chunks: List[str] = []
        for out_path, info in (meta.get("outputs") or {}).items():
            name = rel(out_path)
            assets.append(Asset(name=name, size=int(info.get("bytes", 0))))
            if info.get("entryPoint"):
                chunks.append(name)
        modules = sorted((meta.get("inputs") or {}).keys())
        return assets, chunks, modules

    async def run(self, config: Mapping[str, Any]) -> Optional[CompilationResult]:
        outdir = self.output_dir(config)
        if outdir is not None and any(isinstance(p, CleanOutputPlugin) for p in config.get("plugins") or []):
            self._check_clean_target(outdir, config)
            _clear_dir_contents(outdir)

        with tempfile.TemporaryDirectory(prefix="kcmaker-") as tmp:
            metafile = Path(tmp) / "meta.json"
            args, notes = self.build_args(config, metafile)
            logger.debug("%s %s", self.binary, " ".join(args))

            started = time.monotonic()
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                cwd=str(self.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=os.environ.copy(),
            )
            _stdout, stderr = await proc.communicate()
            elapsed = time.monotonic() - started

            stderr_text = stderr.decode("utf-8", errors="replace")
            errors, warnings = parse_diagnostics(stderr_text)
            if proc.returncode != 0 and not errors:
                errors.append(stderr_text.strip() or f"{self.binary} exited with status {proc.returncode}")

            assets, chunks, modules = self._read_metafile(metafile, outdir)

        return CompilationResult(
            errors=errors,
            warnings=[*notes, *warnings],
            assets=assets,
            modules=modules,
            chunks=chunks,
            elapsed=elapsed,
        )


__all__ = ["EsbuildCompiler", "parse_diagnostics"]
