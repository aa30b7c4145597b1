"""Document input components for chaptervoice.

This package contains the PDF document adapter, outline-to-chapter resolution,
and page-range text extraction used by the conversion pipeline.
"""

from .outline_resolver import OutlineResolver
from .page_text import PageRangeTextExtractor
from .pdf_document import DocumentHandle, PdfDocument, open_document

__all__ = [
    "DocumentHandle",
    "OutlineResolver",
    "PageRangeTextExtractor",
    "PdfDocument",
    "open_document",
]
