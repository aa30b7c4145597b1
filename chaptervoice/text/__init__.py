"""Text segmentation and naming components.

This package provides sentence chunking, chapter selection parsing, and
filename helpers used around the conversion pipeline.
"""

from .chapter_selection import format_chapter_selection, parse_chapter_selection
from .chunking import Chunker
from .slug import suggested_wav_filename

__all__ = [
    "Chunker",
    "format_chapter_selection",
    "parse_chapter_selection",
    "suggested_wav_filename",
]
