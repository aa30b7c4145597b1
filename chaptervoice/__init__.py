"""Top-level package for chaptervoice.

This package converts the outline chapters of a PDF into spoken audio, one
WAV file per chapter. The main entry point is `DocumentSession`.
"""

from loguru import logger

from .session import DocumentSession

__all__ = ["DocumentSession", "__version__"]

__version__ = "0.1.0"

logger.disable("chaptervoice")
