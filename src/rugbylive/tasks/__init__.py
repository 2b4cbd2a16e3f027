"""Task runtime utilities for the staged import pipeline."""

from rugbylive.tasks.runtime import StageContext, StageResult, status_from_failures
from rugbylive.tasks.stages import StageDefinition, StageRegistry

__all__ = [
    "StageContext",
    "StageDefinition",
    "StageRegistry",
    "StageResult",
    "status_from_failures",
]
