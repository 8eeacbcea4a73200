"""Capability contract for pluggable batch checks.

Check authors implement ``CheckableComponent``: a name, a version and a
synchronous ``execute``. The runner owns isolation, so a component may raise
freely; anything it raises becomes a single ``exception`` failure entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from batchqa.batch import Batch
    from batchqa.collector import ResultCollector


@runtime_checkable
class CheckableComponent(Protocol):
    """Protocol for one check in the QA pipeline."""

    name: str
    version: str

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        """Check ``batch`` and record findings in ``collector``.

        Args:
            batch: The batch under test.
            collector: The collector scoped to this component's run. It is the
                only collector a component may write to, and it must not be
                retained after ``execute`` returns.
        """
        ...


__all__ = ("CheckableComponent",)
