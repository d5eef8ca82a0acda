# src/kcmaker/core/runner.py
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Union

from ..compilers.base import CompilationResult, Compiler
from ..plugins import AppsConfigPlugin
from .apps import AppsConfig
from .contracts import BuildMode
from .errors import InternalError

logger = logging.getLogger(__name__)


def prepare_config(
    config: Mapping[str, Any],
    mode: Union[BuildMode, str],
    apps_config: AppsConfig,
) -> Dict[str, Any]:
    """
    Copy of `config` ready for the compiler:
      - `mode` forced to the requested build mode
      - exactly one AppsConfigPlugin at the end of `plugins`
    The input mapping and its plugin list are left untouched.
    """
    build_mode = BuildMode.parse(mode)
    prepared = dict(config)
    prepared["mode"] = build_mode.value
    plugins = [p for p in (config.get("plugins") or []) if not isinstance(p, AppsConfigPlugin)]
    plugins.append(AppsConfigPlugin.from_apps(apps_config))
    prepared["plugins"] = plugins
    return prepared


class BuildRunner:
    """Drives one compiler run for a resolved configuration."""

    def __init__(self, compiler: Compiler) -> None:
        self.compiler = compiler

    async def run(
        self,
        config: Mapping[str, Any],
        mode: Union[BuildMode, str],
        apps_config: AppsConfig,
    ) -> CompilationResult:
        prepared = prepare_config(config, mode, apps_config)
        output = prepared.get("output")
        out_path = output.get("path") if isinstance(output, Mapping) else None
        logger.info("building %d entry point(s) in %s mode", len(prepared.get("entry") or {}), prepared["mode"])

        try:
            result = await self.compiler.run(prepared)
        except Exception:
            logger.exception(
                "A fatal error occurred during compiler execution (mode=%s, output=%s)",
                prepared["mode"],
                out_path,
            )
            raise

        if result is None:
            raise InternalError("compiler returned no result")
        return result


__all__ = ["prepare_config", "BuildRunner"]
