# src/kcmaker/cli.py
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .core.apps import load_apps_config
from .core.discovery import apps_dir
from .core.errors import InternalError, KcmakerError
from .core.pipeline import build
from .core.settings import load_settings
from .dts import generate_type_definitions, load_profile

logger = logging.getLogger("kcmaker")

LOG_FORMAT = "[kcmaker] %(levelname)s %(message)s"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _cmd_build(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(
            args.cwd,
            {
                "mode": args.mode,
                "out_dir": args.out_dir,
                "config": args.config,
                "apps_file": args.apps,
                "esbuild": args.esbuild,
            },
        )
    except KcmakerError as e:
        logger.error("%s", e)
        return 1
    logger.info("Building with esbuild (%s)...", settings.mode)
    return asyncio.run(build(settings))


def _cmd_gen_dts(args: argparse.Namespace) -> int:
    cwd = Path(args.cwd).resolve()
    try:
        if args.apps:
            apps = load_apps_config(cwd / args.apps)
        else:
            apps = load_settings(cwd).apps
        profile = load_profile(cwd / args.profile, args.profile_name)
        asyncio.run(
            generate_type_definitions(apps_dir(cwd), args.app, profile, apps, args.proxy, binary=args.binary)
        )
    except InternalError:
        raise
    except KcmakerError as e:
        logger.error('%s (app="%s")', e, args.app)
        return 1
    return 0


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kcmaker", description="Build kintone customizations.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_build = sub.add_parser("build", help="Bundle every app under src/apps.")
    p_build.add_argument("--mode", default=None, help="development | production (default: kcmaker.yml or production).")
    p_build.add_argument("--out-dir", default=None, help="Output directory (default: dist).")
    p_build.add_argument("--config", default=None, help="User build config module (.py, .yml or .json).")
    p_build.add_argument("--apps", default=None, help="AppsConfig file (YAML or JSON).")
    p_build.add_argument("--esbuild", default=None, help="esbuild executable.")
    p_build.add_argument("--cwd", type=Path, default=Path.cwd(), help="Project directory.")
    p_build.set_defaults(func=_cmd_build)

    p_dts = sub.add_parser("gen-dts", help="Generate kintone.d.ts for one app.")
    p_dts.add_argument("app", help="App folder name under src/apps.")
    p_dts.add_argument("--profile", required=True, help="Connection profile file (YAML).")
    p_dts.add_argument("--profile-name", default=None, help="Profile to use when the file holds several.")
    p_dts.add_argument("--proxy", action="store_true", help="Connect through the profile's proxy.")
    p_dts.add_argument("--apps", default=None, help="AppsConfig file (YAML or JSON).")
    p_dts.add_argument("--binary", default="kintone-dts-gen", help="Generator executable.")
    p_dts.add_argument("--cwd", type=Path, default=Path.cwd(), help="Project directory.")
    p_dts.set_defaults(func=_cmd_gen_dts)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = make_parser().parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
