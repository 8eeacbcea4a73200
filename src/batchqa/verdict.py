"""Map the cumulative collector to a report and a process exit status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from batchqa.collector import ResultCollector


class ExitCode(IntEnum):
    """Process exit statuses of the batch QA tool."""

    SUCCESS = 0
    FAILURES = 1
    USAGE = 2


@dataclass(frozen=True, slots=True)
class Verdict:
    """Rendered outcome of a pipeline run."""

    report: str
    success: bool
    exit_code: ExitCode


def render_verdict(
    collector: ResultCollector,
    *,
    as_json: bool = False,
    include_traces: bool = False,
) -> Verdict:
    """Render ``collector`` and derive the exit status.

    Success means zero failure entries across all components.
    """
    success = collector.is_success()
    if as_json:
        report = json.dumps(collector.to_dict(), indent=2)
    else:
        report = collector.to_report(include_traces=include_traces)
    return Verdict(
        report=report,
        success=success,
        exit_code=ExitCode.SUCCESS if success else ExitCode.FAILURES,
    )
