"""Batch identity: the unit of digitized content under test."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import os
from pathlib import Path

from batchqa.errors import HINTS, NotABatchDirectoryError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Event:
    """A timestamped lifecycle marker in a batch's history."""

    event_id: str
    date: datetime
    success: bool
    details: str = ""


@dataclass(frozen=True, slots=True)
class Batch:
    """Immutable identity of one batch.

    Attributes:
        id: The batch identifier, i.e. the batch directory's name.
        path: Absolute path of the batch directory.
        events: Lifecycle history. Always empty for a fresh identification.
    """

    id: str
    path: Path
    events: tuple[Event, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Batch id must be a non-empty string")


def identify(path: str | os.PathLike[str]) -> Batch:
    """Resolve a batch directory path into a :class:`Batch`.

    Args:
        path: Filesystem path of the batch directory.

    Returns:
        A batch whose ``id`` is the directory name and whose history is empty.

    Raises:
        NotABatchDirectoryError: If ``path`` is not an existing directory.
    """
    batch_dir = Path(path).absolute()
    if not batch_dir.is_dir():
        raise NotABatchDirectoryError(str(batch_dir), hint=HINTS["not_a_directory"])
    # pathlib keeps ".." segments; the directory name must come from the normalized path
    batch_dir = Path(os.path.normpath(batch_dir))
    if not batch_dir.name:
        raise NotABatchDirectoryError(str(batch_dir), hint=HINTS["not_a_directory"])
    log.debug("Identified batch %s at %s", batch_dir.name, batch_dir)
    return Batch(id=batch_dir.name, path=batch_dir)
