"""Shared typed data models for chaptervoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    STATUS_CONVERTING,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_READY,
    AudioBuffer,
    BulkConversionReport,
    Chapter,
    ChapterStatus,
    ConversionResult,
    OutlineEntry,
    TextSpan,
)

__all__ = [
    "AudioBuffer",
    "BulkConversionReport",
    "Chapter",
    "ChapterStatus",
    "ConversionResult",
    "OutlineEntry",
    "TextSpan",
    "STATUS_CONVERTING",
    "STATUS_ERROR",
    "STATUS_PENDING",
    "STATUS_READY",
]
