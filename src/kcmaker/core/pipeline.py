# src/kcmaker/core/pipeline.py
"""
One build, end to end:

  discover entries -> compose base config for the mode -> check AppsConfig
  -> merge the user config module (if any) -> run the compiler -> report

Fatal problems surface as KcmakerError subclasses before the compiler is
started. Compiler-reported errors are not raised; they turn into status 1.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..compilers.base import Compiler
from ..compilers.esbuild import EsbuildCompiler
from ..io.reporter import ResultReporter
from .apps import validate_apps_config
from .composer import compose_config, merge_config
from .contracts import BuildMode
from .discovery import apps_dir, discover_entries
from .errors import InternalError, KcmakerError
from .loader import ConfigLoader
from .runner import BuildRunner
from .settings import BuildSettings

logger = logging.getLogger(__name__)


class BuildPipeline:
    def __init__(
        self,
        settings: BuildSettings,
        *,
        compiler: Optional[Compiler] = None,
        loader: Optional[ConfigLoader] = None,
        reporter: Optional[ResultReporter] = None,
    ) -> None:
        self.settings = settings
        self.compiler = compiler or EsbuildCompiler(binary=settings.esbuild, cwd=settings.cwd)
        self.loader = loader or ConfigLoader()
        self.reporter = reporter or ResultReporter()

    async def run(self) -> int:
        s = self.settings
        entries = discover_entries(apps_dir(s.cwd))
        config = compose_config(entries, s.mode, cwd=s.cwd, out_dir=s.out_dir, defines=s.defines)
        mode = BuildMode.parse(s.mode)
        validate_apps_config(entries, s.apps)

        if s.config is not None:
            user_config = self.loader.load(s.config, mode, cwd=s.cwd)
            config = merge_config(config, user_config)
            logger.info("merged build config from %s", s.config)

        result = await BuildRunner(self.compiler).run(config, mode, s.apps)
        status = self.reporter.report(result)
        if status:
            logger.error("build failed with %d error(s)", len(result.errors))
        else:
            output = config.get("output")
            out_path = output.get("path") if isinstance(output, Mapping) else None
            logger.info("build finished: %d asset(s) in %s", len(result.assets), out_path)
        return status


async def build(
    settings: BuildSettings,
    *,
    compiler: Optional[Compiler] = None,
    loader: Optional[ConfigLoader] = None,
    reporter: Optional[ResultReporter] = None,
) -> int:
    """Run a build and map fatal configuration problems to status 1."""
    pipeline = BuildPipeline(settings, compiler=compiler, loader=loader, reporter=reporter)
    try:
        return await pipeline.run()
    except InternalError:
        raise
    except KcmakerError as e:
        logger.error("%s: %s (mode=%s, cwd=%s)", type(e).__name__, e, settings.mode, settings.cwd)
        return 1


__all__ = ["BuildPipeline", "build"]
