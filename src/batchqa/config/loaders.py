# src/batchqa/config/loaders.py

"""Configuration loaders for environment and files.

Pure data loading: each loader returns a plain dictionary that the resolver
merges. No validation happens here; that is the Settings schema's job.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

import tomllib

from . import utils

log = logging.getLogger(__name__)

CONFIG_TOOL_NAME = "batchqa"

# Meta/control variables that steer resolution but aren't config fields
META_ENV_FIELDS = {"profile", "pyproject_path", "config_home", "log_level", "telemetry"}


def _coerce_bool(v: str) -> bool:
    """Convert string to boolean using common conventions."""
    return v.strip().lower() in {"1", "true", "yes", "on"}


# --- Environment Loading ---


def load_env() -> Mapping[str, Any]:
    """Load configuration from ``BATCHQA_*`` environment variables.

    Performs schema-informed coercion for bool and int fields and skips the
    meta/control variables entirely.
    """
    from .core import Settings  # local import keeps loaders import-light

    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(utils.ENV_PREFIX):
            continue
        field_name = key[len(utils.ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        info = Settings.model_fields.get(field_name)
        target_type = info.annotation if info is not None else None
        config[field_name] = _coerce_env_value(value, target_type)
    return config


def _coerce_env_value(value: str, target_type: Any) -> Any:
    """Coerce env string to target type when possible.

    Falls back to the original string so that the schema reports the error.
    """
    if target_type is bool:
        return _coerce_bool(value)
    if target_type is int:
        try:
            return int(value)
        except ValueError:
            return value
    return value


# --- File loading helpers ---


def list_profiles() -> list[str]:
    """List profile names available in home and project TOML files."""
    names: set[str] = set()
    for path in (utils.get_pyproject_path(), utils.get_home_config_path()):
        data = _read_toml(path)
        profiles = data.get("tool", {}).get(CONFIG_TOOL_NAME, {}).get("profiles", {})
        names.update(name for name in profiles if isinstance(name, str) and name)
    return sorted(names)


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file, returning an empty dict when missing or unparseable."""
    if not path.exists():
        return {}

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def _extract_tables(data: dict[str, Any], profile: str | None) -> dict[str, Any]:
    """Extract ``[tool.batchqa]`` and overlay ``[tool.batchqa.profiles.<profile>]``."""
    tool_section = data.get("tool", {})
    section = tool_section.get(CONFIG_TOOL_NAME, {})

    base_config = {k: v for k, v in section.items() if k != "profiles"}

    if profile:
        profile_config = section.get("profiles", {}).get(profile, {})
        base_config.update(profile_config)

    return base_config


def _load_config_file(path: Path, profile: str | None = None) -> Mapping[str, Any]:
    data = _read_toml(path)
    effective_profile = profile or utils.get_effective_profile()
    return _extract_tables(data, effective_profile)


def load_pyproject(profile: str | None = None) -> Mapping[str, Any]:
    """Load configuration from pyproject.toml in the current working directory."""
    return _load_config_file(utils.get_pyproject_path(), profile)


def load_home(profile: str | None = None) -> Mapping[str, Any]:
    """Load configuration from the user's home directory config file."""
    return _load_config_file(utils.get_home_config_path(), profile)
