"""Check components run by the pipeline.

``CheckableComponent`` is the contract; the classes here are the checks the
default pipeline runs.
"""

from .base import CheckableComponent
from .marker import MarkerComponent
from .metadata import MetadataChecker
from .structure import StructureChecker

__all__ = [
    "CheckableComponent",
    "MarkerComponent",
    "MetadataChecker",
    "StructureChecker",
]
