# src/kcmaker/core/apps.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .contracts import AppEntry
from .errors import ConfigValidationError, SettingsError

logger = logging.getLogger(__name__)

AppsConfig = Mapping[str, Mapping[str, Any]]


class AppRecord(BaseModel):
    """One application record; unknown keys are kept for the runtime."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    app_id: Union[int, str] = Field(alias="appId")

    @field_validator("app_id", mode="before")
    @classmethod
    def _numeric_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("appId must be a number")
        if isinstance(v, str) and not v.strip().isdigit():
            raise ValueError("appId must be a number or a string of digits")
        return v


def load_apps_config(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """Read an apps file (YAML or JSON) into a plain mapping."""
    p = Path(path)
    if not p.is_file():
        raise SettingsError(f"Apps config file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Apps config file is not valid YAML/JSON: {p}\n{e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Apps config file is not a mapping: {p}")
    return data


def validate_app(app_name: str, apps_config: AppsConfig) -> AppRecord:
    record = apps_config.get(app_name)
    if record is None:
        raise ConfigValidationError(f'Configuration for app "{app_name}" not found.')
    if not isinstance(record, Mapping):
        raise ConfigValidationError(f'Configuration for app "{app_name}" must be a mapping.')
    try:
        return AppRecord.model_validate(dict(record))
    except ValidationError as e:
        raise ConfigValidationError(f'Invalid configuration for app "{app_name}":\n{e}') from e


def validate_apps_config(entries: Iterable[AppEntry], apps_config: AppsConfig) -> None:
    """Every discovered app must have a well-formed record."""
    seen = set()
    for entry in entries:
        if entry.app_name in seen:
            continue
        seen.add(entry.app_name)
        validate_app(entry.app_name, apps_config)
    logger.debug("apps config covers %d discovered app(s)", len(seen))


__all__ = ["AppsConfig", "AppRecord", "load_apps_config", "validate_app", "validate_apps_config"]
