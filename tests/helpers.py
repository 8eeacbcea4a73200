"""Test doubles for pipeline components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from batchqa.batch import Batch
    from batchqa.collector import ResultCollector


@dataclass
class RecordingComponent:
    """Records each invocation into a shared call log; finds nothing."""

    name: str
    calls: list[str] = field(default_factory=list)
    version: str = "1.0"

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        del collector
        self.calls.append(f"{self.name}:{batch.id}")


@dataclass
class ReportingComponent:
    """Records one failure per configured message."""

    name: str
    messages: tuple[str, ...] = ("finding",)
    version: str = "1.0"
    calls: list[str] = field(default_factory=list)

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        self.calls.append(f"{self.name}:{batch.id}")
        for message in self.messages:
            collector.add_failure(batch.id, "qa", "finding", message)


@dataclass
class FailingComponent:
    """Raises after optionally recording partial findings."""

    name: str
    error: Exception = field(default_factory=lambda: RuntimeError("parse error"))
    partial: tuple[str, ...] = ()
    version: str = "1.0"
    calls: list[str] = field(default_factory=list)

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        self.calls.append(f"{self.name}:{batch.id}")
        for message in self.partial:
            collector.add_failure(batch.id, "qa", "partial", message)
        raise self.error
