"""Pipeline runner: the fixed, ordered sequence of checks for one batch.

Each component runs against a fresh collector scoped to it. Whatever a
component raises is caught at the isolation boundary and recorded as one
``exception`` failure in that component's collector; the runner then moves
on. No component failure ever stops the sequence. The per-component
collectors are folded, in order, into the cumulative ``batch`` collector.
"""

from __future__ import annotations

import logging
from time import perf_counter
import traceback
from typing import TYPE_CHECKING

from batchqa._version import __version__
from batchqa.collector import ComponentRun, ResultCollector, fold
from batchqa.components import MarkerComponent, MetadataChecker, StructureChecker
from batchqa.core.result_primitives import Failure, Outcome, Success
from batchqa.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Iterable

    from batchqa.batch import Batch
    from batchqa.components import CheckableComponent
    from batchqa.config import FrozenConfig
    from batchqa.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

CUMULATIVE_NAME = "batch"
EXCEPTION_CATEGORY = "exception"


def build_default_pipeline(config: FrozenConfig) -> list[CheckableComponent]:
    """Return the checks every batch goes through, in execution order."""
    return [
        MarkerComponent("Start"),
        StructureChecker(config),
        MetadataChecker(config),
        MarkerComponent("Stop"),
    ]


def invoke(
    component: CheckableComponent, batch: Batch, collector: ResultCollector
) -> Outcome:
    """Run one component, turning anything it raises into a ``Failure``."""
    try:
        component.execute(batch, collector)
    except Exception as e:
        return Failure(e)
    return Success()


def describe_error(error: BaseException) -> str:
    """Return ``"<ExcType>: <message>"``, or just the type when there is no message.

    Never raises: an error whose ``__str__`` fails is described as
    ``<unprintable ExcType>``.
    """
    name = type(error).__name__
    try:
        text = str(error)
    except Exception:
        return f"<unprintable {name}>"
    return f"{name}: {text}" if text else name


def format_trace(error: BaseException) -> str:
    return "".join(traceback.format_exception(error))


def _validate_component(component: object) -> None:
    if not callable(getattr(component, "execute", None)):
        raise TypeError(
            f"{type(component).__name__} is not a CheckableComponent: "
            "it has no callable 'execute'"
        )
    for attr in ("name", "version"):
        if not isinstance(getattr(component, attr, None), str):
            raise TypeError(
                f"{type(component).__name__} is not a CheckableComponent: "
                f"'{attr}' must be a string"
            )


class PipelineRunner:
    """Runs a statically ordered list of components against one batch."""

    def __init__(
        self,
        config: FrozenConfig | None = None,
        components: Iterable[CheckableComponent] | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        """Initialize the runner.

        Args:
            config: Configuration bundle for the default components. Only
                needed when ``components`` is not given.
            components: Components to run instead of the default pipeline.
            telemetry: Telemetry context; resolved from the environment when
                omitted.

        Raises:
            ValueError: If the component list is empty, or neither
                ``config`` nor ``components`` is given.
            TypeError: If a component does not satisfy the contract.
        """
        if components is None:
            if config is None:
                raise ValueError("A config is required to build the default pipeline.")
            components = build_default_pipeline(config)
        raw = list(components)
        if not raw:
            raise ValueError("Pipeline may not be empty; provide at least one component.")
        for component in raw:
            _validate_component(component)
        self.config = config
        self._components: tuple[CheckableComponent, ...] = tuple(raw)
        self._telemetry = telemetry if telemetry is not None else TelemetryContext()

    @property
    def stage_names(self) -> tuple[str, ...]:
        """Component names in execution order."""
        return tuple(c.name for c in self._components)

    @property
    def components(self) -> tuple[CheckableComponent, ...]:
        return self._components

    @property
    def telemetry(self) -> TelemetryContextProtocol:
        return self._telemetry

    def run(self, batch: Batch) -> ResultCollector:
        """Run every component in order and return the cumulative collector."""
        log.info(
            "Checking batch %s with %d components", batch.id, len(self._components)
        )
        result = fold(
            (self.run_component(batch, c) for c in self._components),
            name=CUMULATIVE_NAME,
            version=__version__,
        )
        log.info(
            "Batch %s checked: %d failures", batch.id, result.failure_count
        )
        return result

    def run_component(
        self, batch: Batch, component: CheckableComponent
    ) -> ResultCollector:
        """Run one component inside the isolation boundary.

        Returns the component's own collector, including any entries written
        before a failure plus exactly one ``exception`` entry if it raised.
        """
        collector = ResultCollector(component.name, component.version)
        log.info("Running component %s %s", component.name, component.version)

        with self._telemetry("pipeline.component", component=component.name):
            start = perf_counter()
            outcome = invoke(component, batch, collector)
            duration = perf_counter() - start

        if isinstance(outcome, Failure):
            error = outcome.error
            description = describe_error(error)
            self._telemetry.count("pipeline.component_error", component=component.name)
            log.error(
                "Component %s failed on batch %s: %s",
                component.name,
                batch.id,
                description,
            )
            log.debug("Traceback from component %s", component.name, exc_info=error)
            collector.add_failure(
                batch.id,
                EXCEPTION_CATEGORY,
                type(component).__name__,
                f"Unexpected error in component: {description}",
                format_trace(error),
            )

        collector.record_run(
            ComponentRun(name=component.name, version=component.version, duration_s=duration)
        )
        log.debug(
            "Component %s finished in %.3fs with %d failures",
            component.name,
            duration,
            collector.failure_count,
        )
        return collector
