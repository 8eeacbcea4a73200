"""Batch directory scanning shared by the structure and metadata checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from batchqa.config.utils import compile_pattern

if TYPE_CHECKING:
    from pathlib import Path

    from batchqa.batch import Batch
    from batchqa.config import FrozenConfig


class FileRole(str, Enum):
    """Role of a file inside a batch."""

    DATA = "data"
    CHECKSUM = "checksum"
    METADATA = "metadata"


@dataclass(frozen=True, slots=True)
class BatchFile:
    """A non-ignored file found in a batch directory."""

    path: Path
    rel: str  # posix path relative to the batch directory
    role: FileRole
    group: str

    def subject_id(self, batch: Batch) -> str:
        return f"{batch.id}/{self.rel}"


def classify(name: str, config: FrozenConfig) -> FileRole | None:
    """Return the role of a file name, or None when the name is ignored."""
    if config.ignored_files and compile_pattern(config.ignored_files).fullmatch(name):
        return None
    if name.endswith(config.checksum_postfix):
        return FileRole.CHECKSUM
    if compile_pattern(config.data_file_pattern).fullmatch(name):
        return FileRole.DATA
    return FileRole.METADATA


def group_prefix(name: str, grouping_char: str) -> str:
    """Return the part of ``name`` before the first grouping character."""
    return name.split(grouping_char, 1)[0]


def scan_batch(batch: Batch, config: FrozenConfig) -> list[BatchFile]:
    """List the batch's files in sorted, deterministic order.

    Files under ``structure_storage_dir`` are skipped, so manifests written
    inside the batch are never checked as batch content.
    """
    storage = config.structure_storage_dir.absolute()
    found: list[BatchFile] = []
    for path in sorted(p for p in batch.path.rglob("*") if p.is_file()):
        if path.absolute().is_relative_to(storage):
            continue
        role = classify(path.name, config)
        if role is None:
            continue
        found.append(
            BatchFile(
                path=path,
                rel=path.relative_to(batch.path).as_posix(),
                role=role,
                group=group_prefix(path.name, config.grouping_char),
            )
        )
    return found
