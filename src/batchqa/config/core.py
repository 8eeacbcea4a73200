# src/batchqa/config/core.py

"""Core configuration schema and resolution.

- Single source of truth for fields, types and defaults (``Settings``)
- Immutable runtime payload handed to components (``FrozenConfig``)
- Pure layer merging with origin tracking (``SourceMap``)

Resolution order is defaults < home < project < env < overrides. Values that
depend on the batch being checked (the batch storage root and the structure
working directory) are derived last and only when no layer set them.
"""

from __future__ import annotations

import atexit
from dataclasses import dataclass
from enum import Enum
from functools import cache
import logging
import os
from pathlib import Path
import re
import shutil
import tempfile
from typing import TYPE_CHECKING, Any, Literal, cast, overload
import warnings

from pydantic import BaseModel, Field, ValidationError, field_validator

from batchqa.errors import HINTS, ConfigurationError

from .utils import compile_pattern

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

log = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "batch-qa-"


def _default_threads() -> int:
    return os.cpu_count() or 1


# --- Schema (Pydantic wall) ---


class Settings(BaseModel):
    """Pydantic schema for configuration validation and defaults."""

    # Batch storage root; derived from the batch path when unset
    batches_folder: Path | None = Field(default=None)
    # Platform/environment flag
    at_ninestars: bool = Field(default=True)
    # Working directory for structure manifests; a temp dir when unset
    structure_storage_dir: Path | None = Field(default=None)
    threads_per_batch: int = Field(default_factory=_default_threads, ge=1)

    # PDF files are the data files; everything else is metadata
    data_file_pattern: str = Field(default=r".*\.pdf$", min_length=1)
    grouping_char: str = Field(default=".", min_length=1)
    checksum_postfix: str = Field(default=".md5", min_length=1)
    ignored_files: str = Field(default="")

    model_config = {"extra": "allow"}

    @field_validator("data_file_pattern", "ignored_files")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        if v:
            try:
                compile_pattern(v)
            except re.error as e:
                raise ValueError(f"invalid regular expression {v!r}: {e}") from e
        return v


@cache
def _default_settings() -> dict[str, Any]:
    return Settings().model_dump()


# --- Immutable runtime payload ---


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration bundle passed to components at construction.

    The pipeline runner never inspects it; only components read it.
    """

    batches_folder: Path
    at_ninestars: bool
    structure_storage_dir: Path
    threads_per_batch: int
    data_file_pattern: str
    grouping_char: str
    checksum_postfix: str
    ignored_files: str
    extra: Mapping[str, Any]

    def __str__(self) -> str:
        fields = [
            f"{name}={getattr(self, name)!r}"
            for name in self.__dataclass_fields__
            if name != "extra"
        ]
        return f"FrozenConfig({', '.join(fields)})"

    __repr__ = __str__


# --- Audit types ---


class Origin(str, Enum):
    """Source origin for configuration field values."""

    DEFAULT = "default"
    HOME = "home"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"
    DERIVED = "derived"


@dataclass(frozen=True)
class FieldOrigin:
    """Tracks the origin and context of a configuration field value."""

    origin: Origin
    env_key: str | None = None  # e.g., "BATCHQA_THREADS_PER_BATCH"
    file: str | None = None  # e.g., "~/.config/batchqa.toml"


SourceMap = dict[str, FieldOrigin]

_DOTENV_LOADED: bool = False


def _try_load_dotenv() -> None:
    """Load a .env file once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    from dotenv import load_dotenv

    load_dotenv()
    _DOTENV_LOADED = True


# --- Public resolution API ---


@overload
def resolve_config(
    batch_path: str | os.PathLike[str],
    overrides: Mapping[str, Any] | None = ...,
    profile: str | None = ...,
    *,
    explain: Literal[True],
) -> tuple[FrozenConfig, SourceMap]: ...


@overload
def resolve_config(
    batch_path: str | os.PathLike[str],
    overrides: Mapping[str, Any] | None = ...,
    profile: str | None = ...,
    *,
    explain: Literal[False] = ...,
) -> FrozenConfig: ...


def resolve_config(
    batch_path: str | os.PathLike[str],
    overrides: Mapping[str, Any] | None = None,
    profile: str | None = None,
    *,
    explain: bool = False,
) -> FrozenConfig | tuple[FrozenConfig, SourceMap]:
    """Resolve configuration for checking the batch at ``batch_path``.

    Args:
        batch_path: Path of the batch directory; its parent becomes the
            default batch storage root.
        overrides: Programmatic configuration overrides.
        profile: Configuration profile name to use from TOML files.
        explain: If True, return ``(config, source_map)`` for auditing.

    Returns:
        FrozenConfig, or ``(FrozenConfig, SourceMap)`` when ``explain=True``.

    Raises:
        ConfigurationError: If validation fails or the structure working
            directory cannot be provisioned.
    """
    _try_load_dotenv()

    from . import utils as _utils
    from .loaders import load_env, load_home, load_pyproject

    effective_profile = (
        profile if profile is not None else _utils.get_effective_profile()
    )

    merged, sources = _resolve_layers(
        overrides=overrides or {},
        env=load_env(),
        project=load_pyproject(profile=effective_profile),
        home=load_home(profile=effective_profile),
    )

    _set_if_not_set(
        merged,
        sources,
        "batches_folder",
        lambda: Path(batch_path).absolute().parent,
    )

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg") or "invalid value"
        # Pydantic wraps ValueError messages with this prefix
        msg = msg.removeprefix("Value error, ")
        hint = HINTS["invalid_pattern"] if "regular expression" in msg else None
        if hint is None and loc:
            hint = _utils.field_spec_hint(loc)
        raise ConfigurationError(
            f"Configuration validation failed: {loc}: {msg}" if loc else msg,
            hint=hint,
        ) from e

    # Provisioned only after validation so a bad config leaves nothing behind
    _set_if_not_set(merged, sources, "structure_storage_dir", _provision_temp_dir)
    if settings.structure_storage_dir is None:
        settings = settings.model_copy(
            update={"structure_storage_dir": merged["structure_storage_dir"]}
        )

    frozen = _freeze(settings, merged)
    for line in audit_lines(frozen, sources):
        log.debug("config %s", line)
    return (frozen, sources) if explain else frozen


# --- Internal helpers ---


def _set_if_not_set(
    merged: dict[str, Any],
    sources: SourceMap,
    key: str,
    factory: Callable[[], Any],
) -> None:
    """Apply a derived default only when no layer supplied ``key``."""
    if merged.get(key) is not None:
        where = sources.get(key)
        log.debug(
            "Keeping %s=%r from %s; derived default not applied",
            key,
            merged[key],
            where.origin.value if where else "unknown",
        )
        return
    merged[key] = factory()
    sources[key] = FieldOrigin(origin=Origin.DERIVED)


def _provision_temp_dir() -> Path:
    """Create a private working directory that is removed at interpreter exit."""
    try:
        path = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
    except OSError as e:
        raise ConfigurationError(
            f"Could not create structure working directory: {e}",
            hint=HINTS["temp_dir"],
        ) from e
    atexit.register(shutil.rmtree, path, ignore_errors=True)
    log.debug("Provisioned structure working directory %s", path)
    return path


def _freeze(settings: Settings, merged: Mapping[str, Any]) -> FrozenConfig:
    """Convert validated Settings to an immutable FrozenConfig."""
    known_fields = set(Settings.model_fields.keys())
    extra = {k: v for k, v in merged.items() if k not in known_fields}
    for name in sorted(extra):
        warnings.warn(
            f"Configuration: unknown key {name!r} is passed through unused",
            UserWarning,
            stacklevel=3,
        )

    return FrozenConfig(
        batches_folder=cast("Path", settings.batches_folder),
        at_ninestars=settings.at_ninestars,
        structure_storage_dir=cast("Path", settings.structure_storage_dir),
        threads_per_batch=settings.threads_per_batch,
        data_file_pattern=settings.data_file_pattern,
        grouping_char=settings.grouping_char,
        checksum_postfix=settings.checksum_postfix,
        ignored_files=settings.ignored_files,
        extra=extra,
    )


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
    home: Mapping[str, Any],
) -> tuple[dict[str, Any], SourceMap]:
    """Merge layers with last-wins precedence while recording origins."""
    from .utils import ENV_PREFIX, get_home_config_path, get_pyproject_path

    layers = [
        (Origin.HOME, home),
        (Origin.PROJECT, project),
        (Origin.ENV, env),
        (Origin.OVERRIDES, overrides),
    ]

    out: dict[str, Any] = {}
    src: SourceMap = {}

    for k, v in _default_settings().items():
        out[k] = v
        src[k] = FieldOrigin(origin=Origin.DEFAULT)

    for origin, payload in layers:
        for k, v in payload.items():
            out[k] = v
            if origin is Origin.ENV:
                src[k] = FieldOrigin(origin=origin, env_key=f"{ENV_PREFIX}{k.upper()}")
            elif origin is Origin.PROJECT:
                src[k] = FieldOrigin(origin=origin, file=str(get_pyproject_path()))
            elif origin is Origin.HOME:
                src[k] = FieldOrigin(origin=origin, file=str(get_home_config_path()))
            else:
                src[k] = FieldOrigin(origin=origin)

    return out, src


# --- Audit helpers ---


def _origin_label(field: str, where: FieldOrigin) -> str:
    match where.origin:
        case Origin.ENV:
            from .utils import ENV_PREFIX

            return f"env:{where.env_key or f'{ENV_PREFIX}{field.upper()}'}"
        case Origin.PROJECT:
            return f"file:{where.file or 'pyproject.toml'}"
        case Origin.HOME:
            return f"file:{where.file or '~/.config/batchqa.toml'}"
        case _:
            return str(where.origin.value)


def audit_lines(cfg: FrozenConfig, sources: SourceMap) -> list[str]:
    """Produce human-readable ``field = value (origin)`` lines."""
    lines: list[str] = []
    for field in cfg.__dataclass_fields__:
        if field == "extra":
            continue
        fo = sources.get(field)
        label = _origin_label(field, fo) if fo is not None else "unknown"
        lines.append(f"{field} = {getattr(cfg, field)!s} ({label})")
    for k in sorted(cfg.extra):
        fo = sources.get(k)
        label = _origin_label(k, fo) if fo is not None else "unknown"
        lines.append(f"{k} = {cfg.extra[k]!s} ({label}, unused)")
    return lines


def to_dict(cfg: FrozenConfig) -> dict[str, Any]:
    """JSON-friendly view of a configuration bundle."""
    return {
        "batches_folder": str(cfg.batches_folder),
        "at_ninestars": cfg.at_ninestars,
        "structure_storage_dir": str(cfg.structure_storage_dir),
        "threads_per_batch": cfg.threads_per_batch,
        "data_file_pattern": cfg.data_file_pattern,
        "grouping_char": cfg.grouping_char,
        "checksum_postfix": cfg.checksum_postfix,
        "ignored_files": cfg.ignored_files,
        "extra": dict(cfg.extra),
    }
