# src/kcmaker/dts.py
"""
Type definitions for one app via the external `kintone-dts-gen` tool.

Only argument assembly lives here; the generator itself is a black box.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.apps import AppsConfig, validate_app
from .core.errors import SettingsError, TypeGenError

logger = logging.getLogger(__name__)

DTS_GEN_BINARY = "kintone-dts-gen"


class Profile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl")
    username: str
    password: str
    proxy: Optional[str] = None


def load_profile(path: Union[str, Path], name: Optional[str] = None) -> Profile:
    """
    Load a connection profile. The file is either a single profile mapping or
    a mapping of profile name -> profile (then `name` selects one, default "default").
    """
    p = Path(path)
    if not p.is_file():
        raise SettingsError(f"Profile file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Profile file is not valid YAML: {p}\n{e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Profile file is not a mapping: {p}")
    if "baseUrl" not in data and "base_url" not in data:
        key = name or "default"
        if key not in data:
            raise SettingsError(f'Profile "{key}" not found in {p}')
        data = data[key]
    try:
        return Profile.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid profile in {p}:\n{e}") from e


def build_dts_args(
    apps_dir: Path,
    app_name: str,
    profile: Profile,
    apps_config: AppsConfig,
    use_proxy: bool = False,
) -> Tuple[List[str], Path]:
    """Return (generator arguments, output .d.ts path) for `app_name`."""
    app_directory = Path(apps_dir) / app_name
    if not app_directory.is_dir():
        raise TypeGenError(f'App folder "{app_name}" does not exist:\n{app_directory}')

    record = validate_app(app_name, apps_config)
    output = app_directory / "types" / "kintone.d.ts"

    args = [
        "--base-url", profile.base_url,
        "-u", profile.username,
        "-p", profile.password,
        "--app-id", str(record.app_id),
        "-o", str(output),
    ]
    if use_proxy:
        if not profile.proxy:
            raise TypeGenError("Proxy mode is enabled, but no proxy configuration was found.")
        args += ["--proxy", profile.proxy]
    return args, output


async def generate_type_definitions(
    apps_dir: Path,
    app_name: str,
    profile: Profile,
    apps_config: AppsConfig,
    use_proxy: bool = False,
    *,
    binary: str = DTS_GEN_BINARY,
) -> Path:
    args, output = build_dts_args(apps_dir, app_name, profile, apps_config, use_proxy)
    logger.info('generating type definitions for "%s"', app_name)

    try:
        proc = await asyncio.create_subprocess_exec(binary, *args)
    except FileNotFoundError as e:
        raise TypeGenError(f"{binary} is not installed or not on PATH") from e
    rc = await proc.wait()
    if rc != 0:
        raise TypeGenError(f'{binary} exited with status {rc} for app "{app_name}"')

    logger.info('type definitions written to %s', output)
    return output


__all__ = ["DTS_GEN_BINARY", "Profile", "load_profile", "build_dts_args", "generate_type_definitions"]
