"""batch-qa-tool: run QA checks against one batch of digitized content.

Public API:
    - identify(): Resolve a batch directory into a Batch
    - resolve_config(): Build the configuration bundle for a batch
    - PipelineRunner: Run the ordered checks and fold their results
    - ResultCollector: Aggregated failures with report rendering
    - render_verdict(): Report text, success flag and exit status
"""

from __future__ import annotations

import logging

from batchqa._version import __version__
from batchqa.batch import Batch, Event, identify
from batchqa.collector import ComponentRun, FailureEntry, ResultCollector, fold
from batchqa.components import (
    CheckableComponent,
    MarkerComponent,
    MetadataChecker,
    StructureChecker,
)
from batchqa.config import FrozenConfig, resolve_config
from batchqa.errors import (
    BatchQAError,
    ConfigurationError,
    NotABatchDirectoryError,
    UsageError,
)
from batchqa.runner import PipelineRunner, build_default_pipeline
from batchqa.verdict import ExitCode, Verdict, render_verdict

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("batchqa").addHandler(logging.NullHandler())

__all__ = [
    "Batch",
    "BatchQAError",
    "CheckableComponent",
    "ComponentRun",
    "ConfigurationError",
    "Event",
    "ExitCode",
    "FailureEntry",
    "FrozenConfig",
    "MarkerComponent",
    "MetadataChecker",
    "NotABatchDirectoryError",
    "PipelineRunner",
    "ResultCollector",
    "StructureChecker",
    "UsageError",
    "Verdict",
    "__version__",
    "build_default_pipeline",
    "fold",
    "identify",
    "render_verdict",
    "resolve_config",
]
