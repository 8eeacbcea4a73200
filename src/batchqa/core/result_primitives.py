"""Outcome of invoking one component.

The runner converts whatever a component raises into a ``Failure`` at the
isolation boundary and branches on the outcome, not on exceptions.
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class Success:
    """The component's ``execute`` returned normally."""


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """The component raised ``error``; its traceback stays attached."""

    error: Exception


type Outcome = Success | Failure
