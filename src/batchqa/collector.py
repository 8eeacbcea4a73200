"""Result collection and aggregation.

A ``ResultCollector`` accumulates failure entries produced by one component
run. Collectors combine with :meth:`ResultCollector.merge`, a pure,
associative, order-preserving append, so the aggregate of a whole pipeline is
a fold over the per-component collectors (see :func:`fold`).

Successes are implicit: a component that ran and recorded nothing passed.
The ``runs`` sequence keeps that provenance so reports can list every
component that contributed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from functools import reduce
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FailureEntry:
    """One recorded failure.

    Attributes:
        subject_id: What failed, e.g. a batch id or ``<batch id>/<file>``.
        category: Coarse kind of failure (``exception``, ``checksum``, ...).
        detail: Finer classification or the implementation that failed.
        message: Human-readable description.
        trace: Diagnostic trace text; empty for substantive QA findings.
        component: Name of the collector that recorded the entry.
    """

    subject_id: str
    category: str
    detail: str
    message: str
    trace: str = ""
    component: str = ""


@dataclass(frozen=True, slots=True)
class ComponentRun:
    """Provenance of one component that contributed to a collector."""

    name: str
    version: str
    duration_s: float = 0.0


class ResultCollector:
    """Ordered accumulation of failure entries for a named producer."""

    __slots__ = ("_entries", "_runs", "component_name", "component_version")

    def __init__(
        self,
        component_name: str,
        component_version: str,
        *,
        entries: Iterable[FailureEntry] = (),
        runs: Iterable[ComponentRun] = (),
    ) -> None:
        """Create a collector scoped to one producer.

        Args:
            component_name: Name of the component (or aggregate) owning it.
            component_version: Version of that component.
            entries: Initial failure entries, kept in order.
            runs: Initial component provenance, kept in order.
        """
        self.component_name = component_name
        self.component_version = component_version
        self._entries: list[FailureEntry] = list(entries)
        self._runs: list[ComponentRun] = list(runs)

    @property
    def entries(self) -> tuple[FailureEntry, ...]:
        """Failure entries in recording order."""
        return tuple(self._entries)

    @property
    def runs(self) -> tuple[ComponentRun, ...]:
        """Components that contributed to this collector, in order."""
        return tuple(self._runs)

    @property
    def failure_count(self) -> int:
        return len(self._entries)

    def add_failure(
        self,
        subject_id: str,
        category: str,
        detail: str,
        message: str,
        trace: str = "",
    ) -> FailureEntry:
        """Record a failure and return the stored entry."""
        entry = FailureEntry(
            subject_id=subject_id,
            category=category,
            detail=detail,
            message=message,
            trace=trace,
            component=self.component_name,
        )
        self._entries.append(entry)
        log.debug(
            "%s recorded %s failure for %s: %s",
            self.component_name,
            category,
            subject_id,
            message,
        )
        return entry

    def record_run(self, run: ComponentRun) -> None:
        """Record that a component contributed to this collector."""
        self._runs.append(run)

    def merge(self, other: ResultCollector) -> ResultCollector:
        """Return a new collector holding ``self``'s entries followed by ``other``'s.

        The result keeps ``self``'s name and version. Neither operand is
        modified, nothing is dropped and nothing is deduplicated.
        """
        return ResultCollector(
            self.component_name,
            self.component_version,
            entries=(*self._entries, *other._entries),
            runs=(*self._runs, *other._runs),
        )

    def is_success(self) -> bool:
        """Return True iff no failure has been recorded."""
        return not self._entries

    def to_report(self, *, include_traces: bool = False) -> str:
        """Render a deterministic, human-readable report.

        Failures are listed in the order they were recorded. Durations and
        traces are left out by default so identical runs render identically.
        """
        status = "SUCCESS" if self.is_success() else "FAILURE"
        count = self.failure_count
        noun = "failure" if count == 1 else "failures"
        lines = [
            f"Result for {self.component_name} {self.component_version}: "
            f"{status} ({count} {noun})"
        ]

        if self._runs:
            per_component = Counter(entry.component for entry in self._entries)
            lines.append("Components:")
            for run in self._runs:
                found = per_component[run.name]
                if not found:
                    outcome = "ok"
                else:
                    outcome = f"{found} {'failure' if found == 1 else 'failures'}"
                lines.append(f"  {run.name} {run.version}: {outcome}")

        if self._entries:
            lines.append("Failures:")
            for idx, entry in enumerate(self._entries, start=1):
                lines.append(
                    f"  [{idx}] subject={entry.subject_id} category={entry.category}"
                    f" component={entry.component}"
                )
                lines.append(f"      detail: {entry.detail}")
                lines.append(f"      message: {entry.message}")
                if include_traces and entry.trace:
                    lines.append("      trace:")
                    lines.extend(
                        f"        {line}" for line in entry.trace.rstrip().splitlines()
                    )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot."""
        return {
            "component": self.component_name,
            "version": self.component_version,
            "success": self.is_success(),
            "runs": [asdict(run) for run in self._runs],
            "failures": [asdict(entry) for entry in self._entries],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultCollector):
            return NotImplemented
        return (
            self.component_name == other.component_name
            and self.component_version == other.component_version
            and self._entries == other._entries
            and self._runs == other._runs
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"ResultCollector(component_name={self.component_name!r}, "
            f"component_version={self.component_version!r}, "
            f"failures={self.failure_count}, runs={len(self._runs)})"
        )


def fold(
    collectors: Iterable[ResultCollector], *, name: str, version: str
) -> ResultCollector:
    """Merge collectors in order into a new collector named ``name``."""
    return reduce(
        lambda acc, nxt: acc.merge(nxt),
        collectors,
        ResultCollector(name, version),
    )
