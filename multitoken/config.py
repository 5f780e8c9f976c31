"""
multitoken — Configuration
Optional YAML settings file, overridden by environment variables.

    MULTITOKEN_CONFIG     path to the YAML file
    MULTITOKEN_GUARD_ALL  "1"/"true" to guard transfer and approve as well as mint
    MULTITOKEN_LOG_LEVEL  logging level name for the CLI
    MULTITOKEN_STATE      snapshot path used by the CLI
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_STATE_PATH = Path("data") / "multitoken" / "state.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class LedgerSettings:
    guard_all_mutations: bool = False
    log_level: str = "INFO"
    state_path: Path = DEFAULT_STATE_PATH


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _parse_level(value: Any, key: str) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{key} must be a logging level name, got {value!r}")
    return level


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    unknown = set(data) - {"guard_all_mutations", "log_level", "state_path"}
    if unknown:
        raise ValueError(f"{path}: unknown settings {sorted(unknown)}")

    return data


def load_settings(path: Optional[str | Path] = None) -> LedgerSettings:
    """Build settings from defaults, the YAML file (if any), then the environment."""
    settings = LedgerSettings()

    config_path = path or os.environ.get("MULTITOKEN_CONFIG")
    if config_path:
        data = _load_yaml(Path(config_path))
        if "guard_all_mutations" in data:
            settings = replace(
                settings,
                guard_all_mutations=_parse_bool(data["guard_all_mutations"], "guard_all_mutations"),
            )
        if "log_level" in data:
            settings = replace(settings, log_level=_parse_level(data["log_level"], "log_level"))
        if "state_path" in data:
            settings = replace(settings, state_path=Path(str(data["state_path"])))

    env = os.environ
    if "MULTITOKEN_GUARD_ALL" in env:
        settings = replace(
            settings,
            guard_all_mutations=_parse_bool(env["MULTITOKEN_GUARD_ALL"], "MULTITOKEN_GUARD_ALL"),
        )
    if "MULTITOKEN_LOG_LEVEL" in env:
        settings = replace(settings, log_level=_parse_level(env["MULTITOKEN_LOG_LEVEL"], "MULTITOKEN_LOG_LEVEL"))
    if env.get("MULTITOKEN_STATE"):
        settings = replace(settings, state_path=Path(env["MULTITOKEN_STATE"]))

    return settings
