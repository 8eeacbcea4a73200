"""Log-only marker component bracketing the real checks."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING

from batchqa._version import __version__

if TYPE_CHECKING:
    from batchqa.batch import Batch
    from batchqa.collector import ResultCollector

log = logging.getLogger(__name__)


class MarkerComponent:
    """Emit a timestamped log line; never records anything."""

    version = __version__

    def __init__(self, label: str) -> None:
        self.label = label
        self.name = f"marker-{label}"

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        del collector
        log.info(
            "%s of batch %s at %s",
            self.label,
            batch.id,
            datetime.now(UTC).isoformat(timespec="seconds"),
        )
