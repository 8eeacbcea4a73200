"""Process-wide logging bootstrap for the command line entry point.

The library itself only installs a ``NullHandler``; this is the single place
that attaches a real handler, and it is called once before the pipeline runs.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_VAR = "BATCHQA_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_NAME = "batchqa-cli"


def resolve_level(verbosity: int = 0) -> int:
    """Map ``-v`` repetitions, then ``BATCHQA_LOG_LEVEL``, to a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    name = os.environ.get(LOG_LEVEL_VAR, "").strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.WARNING)


def configure_logging(verbosity: int = 0) -> logging.Handler:
    """Attach a stderr handler to the ``batchqa`` logger, replacing a previous one."""
    logger = logging.getLogger("batchqa")
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(verbosity))
    return handler
