# src/batchqa/config/utils.py

"""Configuration utilities shared by the loaders and the resolver.

Pure helpers with no imports from the rest of the config package, so they can
be used anywhere without creating circular dependencies.
"""

from __future__ import annotations

from functools import cache
import os
from pathlib import Path
import re
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Callable

# --- Constants ---

ENV_PREFIX = "BATCHQA_"

CONFIG_HOME_VAR = "BATCHQA_CONFIG_HOME"
PYPROJECT_PATH_VAR = "BATCHQA_PYPROJECT_PATH"
PROFILE_VAR = "BATCHQA_PROFILE"

# --- Path Utilities ---


def get_config_path(path_type: Literal["project", "home"]) -> Path:
    """Get configuration file path with environment override support.

    Falls back to a cwd-based path for the "home" type when Path.home()
    cannot be resolved (restricted environments without HOME).
    """
    specs: dict[str, tuple[str, Callable[[], Path]]] = {
        "project": (
            PYPROJECT_PATH_VAR,
            lambda: Path.cwd() / "pyproject.toml",
        ),
        "home": (
            CONFIG_HOME_VAR,
            lambda: Path.home() / ".config" / "batchqa.toml",
        ),
    }
    env_var, default_factory = specs[path_type]
    if override := os.environ.get(env_var):
        return Path(override)
    try:
        return default_factory()
    except RuntimeError:
        if path_type == "home":
            return Path.cwd() / "batchqa.toml"
        raise


def get_pyproject_path() -> Path:
    """Return path to the project pyproject.toml."""
    return get_config_path("project")


def get_home_config_path() -> Path:
    """Return path to the user's home-level config TOML."""
    return get_config_path("home")


def get_effective_profile() -> str | None:
    """Return the profile selected through the environment, if any."""
    return os.environ.get(PROFILE_VAR) or None


# --- Field Hint Helpers ---


def field_spec_hint(field: str) -> str:
    """Return a compact hint for setting a config field via env or files."""
    env_key = f"{ENV_PREFIX}{field.upper()}"
    return (
        f"Set {env_key} or [tool.batchqa] {field} in pyproject.toml "
        "(or ~/.config/batchqa.toml)."
    )


# --- Pattern helpers ---


@cache
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a file-name regex with caching; raises re.error when invalid."""
    return re.compile(pattern)
