"""Chapter conversion pipeline.

This package contains the per-chapter state machine and the sequential bulk
scheduler built on top of it.
"""

from .orchestrator import ChapterConversionOrchestrator, ChapterTextSource
from .scheduler import BulkConversionScheduler

__all__ = [
    "BulkConversionScheduler",
    "ChapterConversionOrchestrator",
    "ChapterTextSource",
]
